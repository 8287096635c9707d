"""Daily notes schemas"""

from datetime import date, datetime
from typing import Optional

from ...shared.schemas import CamelModel, CamelRequest


class NoteSave(CamelRequest):
    notes: Optional[str] = None


class NoteResponse(CamelModel):
    note_id: str
    agent_id: str
    note_date: date
    notes: str
    created_date: Optional[datetime] = None
    modified_date: Optional[datetime] = None
