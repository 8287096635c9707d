"""Policy router - FastAPI endpoints for client policies"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...shared.dependencies import valid_agent_id
from ...shared.responses import success
from .schemas import PolicyCreate, PolicyRenew, PolicyResponse, PolicyUpdate
from .service import DEFAULT_EXPIRY_WINDOW_DAYS, PolicyService

router = APIRouter(prefix="/api/policies", tags=["Policies"])


def get_policy_service(db: Session = Depends(get_db)) -> PolicyService:
    """Dependency injection for PolicyService"""
    return PolicyService(db)


@router.post("/{agent_id}", status_code=201)
async def create_policy(
    data: PolicyCreate,
    agent_id: str = Depends(valid_agent_id),
    service: PolicyService = Depends(get_policy_service),
):
    policy = service.create_policy(agent_id, data)
    return success(PolicyResponse.model_validate(policy), "Policy created successfully", policyId=policy.policy_id)


@router.get("/{agent_id}")
async def get_policies(
    agent_id: str = Depends(valid_agent_id),
    client_id: Optional[str] = Query(None, alias="clientId"),
    status: Optional[str] = Query(None),
    type_id: Optional[str] = Query(None, alias="typeId"),
    company_id: Optional[str] = Query(None, alias="companyId"),
    service: PolicyService = Depends(get_policy_service),
):
    policies = service.list_policies(agent_id, client_id, status, type_id, company_id)
    return success([PolicyResponse.model_validate(p) for p in policies])


@router.get("/{agent_id}/expiring")
async def get_expiring_policies(
    agent_id: str = Depends(valid_agent_id),
    days_ahead: int = Query(DEFAULT_EXPIRY_WINDOW_DAYS, alias="daysAhead", ge=0, le=3650),
    service: PolicyService = Depends(get_policy_service),
):
    return success([PolicyResponse.model_validate(p) for p in service.get_expiring(agent_id, days_ahead)])


@router.get("/{agent_id}/statistics")
async def get_policy_statistics(
    agent_id: str = Depends(valid_agent_id),
    service: PolicyService = Depends(get_policy_service),
):
    return success(service.get_statistics(agent_id))


@router.get("/{agent_id}/{policy_id}")
async def get_policy(
    policy_id: str,
    agent_id: str = Depends(valid_agent_id),
    service: PolicyService = Depends(get_policy_service),
):
    return success(PolicyResponse.model_validate(service.get_policy(agent_id, policy_id)))


@router.put("/{agent_id}/{policy_id}")
async def update_policy(
    policy_id: str,
    data: PolicyUpdate,
    agent_id: str = Depends(valid_agent_id),
    service: PolicyService = Depends(get_policy_service),
):
    policy = service.update_policy(agent_id, policy_id, data)
    return success(PolicyResponse.model_validate(policy), "Policy updated successfully")


@router.post("/{agent_id}/{policy_id}/renew")
async def renew_policy(
    policy_id: str,
    data: PolicyRenew,
    agent_id: str = Depends(valid_agent_id),
    service: PolicyService = Depends(get_policy_service),
):
    policy = service.renew_policy(agent_id, policy_id, data)
    return success(PolicyResponse.model_validate(policy), "Policy renewed successfully")


@router.delete("/{agent_id}/{policy_id}")
async def delete_policy(
    policy_id: str,
    agent_id: str = Depends(valid_agent_id),
    service: PolicyService = Depends(get_policy_service),
):
    service.delete_policy(agent_id, policy_id)
    return success(message="Policy deleted successfully")
