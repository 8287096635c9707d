"""Daily notes router"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...shared.dependencies import valid_agent_id
from ...shared.responses import success
from ...shared.validators import parse_date_param
from .schemas import NoteResponse, NoteSave
from .service import NotesService

router = APIRouter(prefix="/api/notes", tags=["Notes"])


def get_notes_service(db: Session = Depends(get_db)) -> NotesService:
    """Dependency injection for NotesService"""
    return NotesService(db)


@router.get("/{agent_id}")
async def list_notes(
    agent_id: str = Depends(valid_agent_id),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    service: NotesService = Depends(get_notes_service),
):
    notes = service.list_notes(
        agent_id, parse_date_param(start_date, "startDate"), parse_date_param(end_date, "endDate")
    )
    return success([NoteResponse.model_validate(n) for n in notes])


@router.get("/{agent_id}/search")
async def search_notes(
    agent_id: str = Depends(valid_agent_id),
    q: Optional[str] = Query(None),
    service: NotesService = Depends(get_notes_service),
):
    return success([NoteResponse.model_validate(n) for n in service.search_notes(agent_id, q)])


@router.get("/{agent_id}/{note_date}")
async def get_notes(
    note_date: str,
    agent_id: str = Depends(valid_agent_id),
    service: NotesService = Depends(get_notes_service),
):
    day = parse_date_param(note_date, "noteDate")
    note = service.get_notes(agent_id, day)
    if not note:
        # An empty day is not an error for the calendar view
        return success({"noteDate": day.isoformat(), "notes": ""})
    return success(NoteResponse.model_validate(note))


@router.post("/{agent_id}/{note_date}")
async def save_notes(
    note_date: str,
    data: NoteSave,
    agent_id: str = Depends(valid_agent_id),
    service: NotesService = Depends(get_notes_service),
):
    note = service.save_notes(agent_id, parse_date_param(note_date, "noteDate"), data.notes)
    return success(NoteResponse.model_validate(note), "Notes saved successfully")


@router.delete("/{agent_id}/{note_date}")
async def delete_notes(
    note_date: str,
    agent_id: str = Depends(valid_agent_id),
    service: NotesService = Depends(get_notes_service),
):
    service.delete_notes(agent_id, parse_date_param(note_date, "noteDate"))
    return success(message="Notes deleted successfully")
