"""Daily notes service"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...errors import NotFoundError, ValidationError
from ...models import DailyNote
from .repository import NotesRepository


class NotesService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = NotesRepository()

    def get_notes(self, agent_id: str, note_date: date) -> Optional[DailyNote]:
        return self.repo.get_for_date(self.db, agent_id, note_date)

    def save_notes(self, agent_id: str, note_date: date, notes: Optional[str]) -> DailyNote:
        return self.repo.save(self.db, agent_id, note_date, notes or "")

    def delete_notes(self, agent_id: str, note_date: date) -> None:
        if self.repo.delete(self.db, agent_id, note_date) == 0:
            raise NotFoundError("No notes found for this date")

    def list_notes(
        self, agent_id: str, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[DailyNote]:
        if start_date and end_date and start_date > end_date:
            raise ValidationError("startDate must be on or before endDate", "INVALID_DATE_RANGE")
        return self.repo.get_range(self.db, agent_id, start_date, end_date)

    def search_notes(self, agent_id: str, term: Optional[str]) -> list[DailyNote]:
        if not term or not term.strip():
            return []
        return self.repo.search(self.db, agent_id, term)
