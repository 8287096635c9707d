"""Agent router - account, profile and lookup endpoints"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from ...database import Database, get_database, get_db
from ...shared.dependencies import valid_agent_id
from ...shared.responses import success
from ..notifications.dispatcher import dispatch_notifications
from .schemas import (
    AgentLogin,
    AgentRegister,
    AgentResponse,
    AgentSettingsUpdate,
    AgentUpdate,
    ChangePassword,
    InsuranceCompanyResponse,
    PasswordResetConfirm,
    PasswordResetRequest,
    PolicyTypeResponse,
)
from .service import AgentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/agent", tags=["Agents"])
lookups_router = APIRouter(prefix="/api", tags=["Lookups"])


def get_agent_service(db: Session = Depends(get_db)) -> AgentService:
    """Dependency injection for AgentService"""
    return AgentService(db)


def _dispatch_queued(service: AgentService, background_tasks: BackgroundTasks, database: Database):
    if service.queued_notifications:
        background_tasks.add_task(dispatch_notifications, database, list(service.queued_notifications))


# ============================================================================
# AUTHENTICATION
# ============================================================================


@router.post("/register", status_code=201)
async def register_agent(
    data: AgentRegister,
    background_tasks: BackgroundTasks,
    database: Database = Depends(get_database),
    service: AgentService = Depends(get_agent_service),
):
    agent = service.register(data)
    _dispatch_queued(service, background_tasks, database)
    return success(AgentResponse.model_validate(agent), "Agent registered successfully", agentId=agent.agent_id)


@router.post("/login")
async def login_agent(
    data: AgentLogin,
    background_tasks: BackgroundTasks,
    database: Database = Depends(get_database),
    service: AgentService = Depends(get_agent_service),
):
    agent = service.login(data)
    _dispatch_queued(service, background_tasks, database)
    return success(AgentResponse.model_validate(agent), "Login successful", agentId=agent.agent_id)


@router.post("/password-reset/request")
async def request_password_reset(
    data: PasswordResetRequest,
    background_tasks: BackgroundTasks,
    database: Database = Depends(get_database),
    service: AgentService = Depends(get_agent_service),
):
    service.request_password_reset(data)
    _dispatch_queued(service, background_tasks, database)
    # Same answer whether or not the email exists
    return success(message="If the email is registered, a reset link has been sent")


@router.post("/password-reset/confirm")
async def confirm_password_reset(
    data: PasswordResetConfirm,
    service: AgentService = Depends(get_agent_service),
):
    service.confirm_password_reset(data)
    return success(message="Password has been reset")


# ============================================================================
# PROFILE
# ============================================================================


@router.get("/{agent_id}")
async def get_agent_profile(
    agent_id: str = Depends(valid_agent_id),
    service: AgentService = Depends(get_agent_service),
):
    return success(AgentResponse.model_validate(service.get_agent(agent_id)))


@router.put("/{agent_id}")
async def update_agent_profile(
    data: AgentUpdate,
    agent_id: str = Depends(valid_agent_id),
    service: AgentService = Depends(get_agent_service),
):
    agent = service.update_profile(agent_id, data)
    return success(AgentResponse.model_validate(agent), "Profile updated")


@router.put("/{agent_id}/settings")
async def update_agent_settings(
    data: AgentSettingsUpdate,
    agent_id: str = Depends(valid_agent_id),
    service: AgentService = Depends(get_agent_service),
):
    agent = service.update_settings(agent_id, data)
    return success(AgentResponse.model_validate(agent), "Settings updated")


@router.post("/{agent_id}/change-password")
async def change_password(
    data: ChangePassword,
    agent_id: str = Depends(valid_agent_id),
    service: AgentService = Depends(get_agent_service),
):
    service.change_password(agent_id, data)
    return success(message="Password changed successfully")


# ============================================================================
# LOOKUPS
# ============================================================================


@lookups_router.get("/insurance-companies")
async def get_insurance_companies(service: AgentService = Depends(get_agent_service)):
    return success([InsuranceCompanyResponse.model_validate(c) for c in service.get_insurance_companies()])


@lookups_router.get("/policy-types")
async def get_policy_types(service: AgentService = Depends(get_agent_service)):
    return success([PolicyTypeResponse.model_validate(t) for t in service.get_policy_types()])
