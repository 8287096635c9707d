"""Client router - FastAPI endpoints for clients and prospects"""

import logging
import math
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...shared.dependencies import valid_agent_id
from ...shared.responses import success
from .schemas import BirthdayResponse, ClientCreate, ClientResponse, ClientUpdate
from .service import ClientService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/clients", tags=["Clients"])


def get_client_service(db: Session = Depends(get_db)) -> ClientService:
    """Dependency injection for ClientService"""
    return ClientService(db)


# ============================================================================
# COLLECTION
# ============================================================================


@router.post("/{agent_id}", status_code=201)
async def create_client(
    data: ClientCreate,
    agent_id: str = Depends(valid_agent_id),
    service: ClientService = Depends(get_client_service),
):
    client = service.create_client(agent_id, data)
    return success(ClientResponse.model_validate(client), "Client created successfully", clientId=client.client_id)


@router.get("/{agent_id}")
async def get_clients(
    agent_id: str = Depends(valid_agent_id),
    filter_type: str = Query("all", alias="filterType"),
    insurance_type: Optional[str] = Query(None, alias="insuranceType"),
    search_term: Optional[str] = Query(None, alias="searchTerm"),
    page_number: int = Query(1, alias="pageNumber", ge=1),
    page_size: int = Query(50, alias="pageSize", ge=1, le=200),
    service: ClientService = Depends(get_client_service),
):
    clients, total = service.list_clients(
        agent_id, filter_type, insurance_type, search_term, page_number, page_size
    )
    return success(
        {
            "clients": clients,
            "total": total,
            "pageNumber": page_number,
            "pageSize": page_size,
            "totalPages": math.ceil(total / page_size) if total else 0,
        }
    )


@router.get("/{agent_id}/statistics")
async def get_client_statistics(
    agent_id: str = Depends(valid_agent_id),
    service: ClientService = Depends(get_client_service),
):
    return success(service.get_statistics(agent_id))


@router.get("/{agent_id}/birthdays")
async def get_todays_birthdays(
    agent_id: str = Depends(valid_agent_id),
    service: ClientService = Depends(get_client_service),
):
    return success([BirthdayResponse.model_validate(c) for c in service.get_birthdays(agent_id)])


@router.get("/{agent_id}/search")
async def search_clients(
    agent_id: str = Depends(valid_agent_id),
    q: Optional[str] = Query(None),
    service: ClientService = Depends(get_client_service),
):
    return success([ClientResponse.model_validate(c) for c in service.search_clients(agent_id, q)])


# ============================================================================
# SINGLE CLIENT
# ============================================================================


@router.get("/{agent_id}/{client_id}")
async def get_client(
    client_id: str,
    agent_id: str = Depends(valid_agent_id),
    service: ClientService = Depends(get_client_service),
):
    """Client with policies, recent appointments and active reminders"""
    return success(service.get_client_details(agent_id, client_id))


@router.put("/{agent_id}/{client_id}")
async def update_client(
    client_id: str,
    data: ClientUpdate,
    agent_id: str = Depends(valid_agent_id),
    service: ClientService = Depends(get_client_service),
):
    client = service.update_client(agent_id, client_id, data)
    return success(ClientResponse.model_validate(client), "Client updated successfully")


@router.put("/{agent_id}/{client_id}/convert")
async def convert_to_client(
    client_id: str,
    agent_id: str = Depends(valid_agent_id),
    service: ClientService = Depends(get_client_service),
):
    client = service.convert_to_client(agent_id, client_id)
    return success(ClientResponse.model_validate(client), "Prospect converted to client")


@router.delete("/{agent_id}/{client_id}")
async def delete_client(
    client_id: str,
    agent_id: str = Depends(valid_agent_id),
    service: ClientService = Depends(get_client_service),
):
    service.delete_client(agent_id, client_id)
    return success(message="Client deleted successfully")
