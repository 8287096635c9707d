"""Appointment router - FastAPI endpoints for scheduling"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from ...database import Database, get_database, get_db
from ...shared.dates import local_today
from ...shared.dependencies import valid_agent_id
from ...shared.responses import success
from ...shared.validators import parse_date_param, require_fields
from ..clients.schemas import ClientResponse
from ..notifications.dispatcher import dispatch_notifications
from .schemas import (
    AppointmentCreate,
    AppointmentResponse,
    AppointmentUpdate,
    ConflictCheckRequest,
    StatusUpdate,
)
from .service import AppointmentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/appointments", tags=["Appointments"])


def get_appointment_service(db: Session = Depends(get_db)) -> AppointmentService:
    """Dependency injection for AppointmentService"""
    return AppointmentService(db)


# ============================================================================
# COLLECTION
# ============================================================================


@router.post("/{agent_id}", status_code=201)
async def create_appointment(
    data: AppointmentCreate,
    background_tasks: BackgroundTasks,
    agent_id: str = Depends(valid_agent_id),
    database: Database = Depends(get_database),
    service: AppointmentService = Depends(get_appointment_service),
):
    appointment = service.create_appointment(agent_id, data)
    if service.queued_notifications:
        background_tasks.add_task(dispatch_notifications, database, list(service.queued_notifications))
    return success(
        {
            "success": True,
            "appointmentId": appointment.appointment_id,
            "message": "Appointment created successfully",
            "appointment": AppointmentResponse.model_validate(appointment),
        },
        "Appointment created successfully",
    )


@router.get("/{agent_id}")
async def get_appointments(
    agent_id: str = Depends(valid_agent_id),
    date_range: str = Query("all", alias="dateRange"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    status: Optional[str] = Query(None),
    appointment_type: Optional[str] = Query(None, alias="type"),
    priority: Optional[str] = Query(None),
    client_id: Optional[str] = Query(None, alias="clientId"),
    search_term: Optional[str] = Query(None, alias="searchTerm"),
    page_number: int = Query(1, alias="pageNumber", ge=1),
    page_size: int = Query(50, alias="pageSize", ge=1, le=200),
    service: AppointmentService = Depends(get_appointment_service),
):
    result = service.list_appointments(
        agent_id,
        date_range=date_range,
        start_date=parse_date_param(start_date, "startDate"),
        end_date=parse_date_param(end_date, "endDate"),
        status=status,
        appointment_type=appointment_type,
        priority=priority,
        client_id=client_id,
        search_term=search_term,
        page_number=page_number,
        page_size=page_size,
    )
    return success(result)


# ============================================================================
# VIEWS (declared before /{appointment_id})
# ============================================================================


@router.get("/{agent_id}/today")
async def get_today_appointments(
    agent_id: str = Depends(valid_agent_id),
    service: AppointmentService = Depends(get_appointment_service),
):
    appointments = service.get_today(agent_id)
    return success([AppointmentResponse.model_validate(a) for a in appointments])


@router.get("/{agent_id}/for-date")
async def get_appointments_for_date(
    agent_id: str = Depends(valid_agent_id),
    appointment_date: Optional[str] = Query(None, alias="appointmentDate"),
    service: AppointmentService = Depends(get_appointment_service),
):
    require_fields({"appointmentDate": appointment_date}, ("appointmentDate",))
    day = parse_date_param(appointment_date, "appointmentDate")
    return success([AppointmentResponse.model_validate(a) for a in service.get_for_date(agent_id, day)])


@router.get("/{agent_id}/week-view")
async def get_week_view(
    agent_id: str = Depends(valid_agent_id),
    week_start_date: Optional[str] = Query(None, alias="weekStartDate"),
    service: AppointmentService = Depends(get_appointment_service),
):
    return success(service.get_week_view(agent_id, parse_date_param(week_start_date, "weekStartDate")))


@router.get("/{agent_id}/calendar")
async def get_calendar(
    agent_id: str = Depends(valid_agent_id),
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1900, le=9999),
    service: AppointmentService = Depends(get_appointment_service),
):
    today = local_today()
    return success(service.get_calendar(agent_id, month or today.month, year or today.year))


@router.get("/{agent_id}/search")
async def search_appointments(
    agent_id: str = Depends(valid_agent_id),
    search_term: Optional[str] = Query(None, alias="searchTerm"),
    service: AppointmentService = Depends(get_appointment_service),
):
    return success([AppointmentResponse.model_validate(a) for a in service.search(agent_id, search_term)])


@router.get("/{agent_id}/clients/search")
async def search_clients_for_booking(
    agent_id: str = Depends(valid_agent_id),
    q: Optional[str] = Query(None),
    service: AppointmentService = Depends(get_appointment_service),
):
    return success([ClientResponse.model_validate(c) for c in service.search_clients(agent_id, q)])


@router.get("/{agent_id}/statistics")
async def get_statistics(
    agent_id: str = Depends(valid_agent_id),
    service: AppointmentService = Depends(get_appointment_service),
):
    return success(service.get_statistics(agent_id))


@router.post("/{agent_id}/check-conflicts")
async def check_conflicts(
    data: ConflictCheckRequest,
    agent_id: str = Depends(valid_agent_id),
    service: AppointmentService = Depends(get_appointment_service),
):
    return success(service.check_time_conflicts(agent_id, data))


# ============================================================================
# SINGLE APPOINTMENT
# ============================================================================


@router.get("/{agent_id}/{appointment_id}")
async def get_appointment(
    appointment_id: str,
    agent_id: str = Depends(valid_agent_id),
    service: AppointmentService = Depends(get_appointment_service),
):
    return success(AppointmentResponse.model_validate(service.get_appointment(agent_id, appointment_id)))


@router.put("/{agent_id}/{appointment_id}")
async def update_appointment(
    appointment_id: str,
    data: AppointmentUpdate,
    agent_id: str = Depends(valid_agent_id),
    service: AppointmentService = Depends(get_appointment_service),
):
    appointment = service.update_appointment(agent_id, appointment_id, data)
    return success(AppointmentResponse.model_validate(appointment), "Appointment updated successfully")


@router.patch("/{agent_id}/{appointment_id}/status")
async def update_appointment_status(
    appointment_id: str,
    data: StatusUpdate,
    agent_id: str = Depends(valid_agent_id),
    service: AppointmentService = Depends(get_appointment_service),
):
    appointment = service.update_status(agent_id, appointment_id, data.status)
    return success(AppointmentResponse.model_validate(appointment), "Appointment status updated")


@router.delete("/{agent_id}/{appointment_id}")
async def delete_appointment(
    appointment_id: str,
    agent_id: str = Depends(valid_agent_id),
    service: AppointmentService = Depends(get_appointment_service),
):
    service.delete_appointment(agent_id, appointment_id)
    return success(message="Appointment deleted successfully")
