"""Search router - global search, suggestions and history"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...shared.dependencies import valid_agent_id
from ...shared.responses import success
from ..appointments.schemas import AppointmentResponse
from ..clients.schemas import ClientResponse
from ..policies.schemas import PolicyResponse
from ..reminders.schemas import ReminderResponse
from .schemas import SearchHistoryResponse
from .service import SearchService

router = APIRouter(prefix="/api/search", tags=["Search"])


def get_search_service(db: Session = Depends(get_db)) -> SearchService:
    """Dependency injection for SearchService"""
    return SearchService(db)


@router.get("/{agent_id}/global")
async def global_search(
    agent_id: str = Depends(valid_agent_id),
    q: Optional[str] = Query(None),
    limit: int = Query(10, ge=1, le=50),
    service: SearchService = Depends(get_search_service),
):
    results = service.global_search(agent_id, q, limit)
    return success(results, totalResults=len(results))


@router.get("/{agent_id}/clients")
async def search_clients(
    agent_id: str = Depends(valid_agent_id),
    q: Optional[str] = Query(None),
    service: SearchService = Depends(get_search_service),
):
    return success([ClientResponse.model_validate(c) for c in service.search_clients(agent_id, q)])


@router.get("/{agent_id}/appointments")
async def search_appointments(
    agent_id: str = Depends(valid_agent_id),
    q: Optional[str] = Query(None),
    service: SearchService = Depends(get_search_service),
):
    return success([AppointmentResponse.model_validate(a) for a in service.search_appointments(agent_id, q)])


@router.get("/{agent_id}/policies")
async def search_policies(
    agent_id: str = Depends(valid_agent_id),
    q: Optional[str] = Query(None),
    service: SearchService = Depends(get_search_service),
):
    return success([PolicyResponse.model_validate(p) for p in service.search_policies(agent_id, q)])


@router.get("/{agent_id}/reminders")
async def search_reminders(
    agent_id: str = Depends(valid_agent_id),
    q: Optional[str] = Query(None),
    service: SearchService = Depends(get_search_service),
):
    return success([ReminderResponse.model_validate(r) for r in service.search_reminders(agent_id, q)])


@router.get("/{agent_id}/suggestions")
async def get_suggestions(
    agent_id: str = Depends(valid_agent_id),
    q: Optional[str] = Query(None),
    limit: int = Query(10, ge=1, le=50),
    service: SearchService = Depends(get_search_service),
):
    return success(service.get_suggestions(agent_id, q, limit))


@router.get("/{agent_id}/history")
async def get_search_history(
    agent_id: str = Depends(valid_agent_id),
    limit: int = Query(20, ge=1, le=100),
    service: SearchService = Depends(get_search_service),
):
    return success([SearchHistoryResponse.model_validate(h) for h in service.get_history(agent_id, limit)])


@router.delete("/{agent_id}/history")
async def clear_search_history(
    agent_id: str = Depends(valid_agent_id),
    service: SearchService = Depends(get_search_service),
):
    deleted = service.clear_history(agent_id)
    return success(message="Search history cleared", deletedCount=deleted)


@router.delete("/{agent_id}/history/{search_history_id}")
async def delete_search_history_item(
    search_history_id: str,
    agent_id: str = Depends(valid_agent_id),
    service: SearchService = Depends(get_search_service),
):
    service.delete_history_item(agent_id, search_history_id)
    return success(message="Search history item deleted")


@router.get("/{agent_id}/popular")
async def get_popular_searches(
    agent_id: str = Depends(valid_agent_id),
    limit: int = Query(10, ge=1, le=50),
    service: SearchService = Depends(get_search_service),
):
    return success([SearchHistoryResponse.model_validate(h) for h in service.get_popular(agent_id, limit)])
