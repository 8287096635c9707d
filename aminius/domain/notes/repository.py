"""Daily notes repository"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import DailyNote
from ...shared.queries import LIKE_ESCAPE, contains_pattern


class NotesRepository:
    """Repository for per-day agent notes"""

    @staticmethod
    def get_for_date(db: Session, agent_id: str, note_date: date) -> Optional[DailyNote]:
        return db.query(DailyNote).filter(DailyNote.agent_id == agent_id, DailyNote.note_date == note_date).first()

    @staticmethod
    def save(db: Session, agent_id: str, note_date: date, notes: str) -> DailyNote:
        """Upsert on (agent_id, note_date)"""
        note = NotesRepository.get_for_date(db, agent_id, note_date)
        if note:
            note.notes = notes
        else:
            note = DailyNote(agent_id=agent_id, note_date=note_date, notes=notes)
            db.add(note)
        db.commit()
        db.refresh(note)
        return note

    @staticmethod
    def delete(db: Session, agent_id: str, note_date: date) -> int:
        deleted = (
            db.query(DailyNote)
            .filter(DailyNote.agent_id == agent_id, DailyNote.note_date == note_date)
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted

    @staticmethod
    def get_range(
        db: Session, agent_id: str, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[DailyNote]:
        query = db.query(DailyNote).filter(DailyNote.agent_id == agent_id)
        if start_date:
            query = query.filter(DailyNote.note_date >= start_date)
        if end_date:
            query = query.filter(DailyNote.note_date <= end_date)
        return query.order_by(DailyNote.note_date.desc()).all()

    @staticmethod
    def search(db: Session, agent_id: str, term: str, limit: int = 50) -> list[DailyNote]:
        return (
            db.query(DailyNote)
            .filter(DailyNote.agent_id == agent_id, DailyNote.notes.ilike(contains_pattern(term), escape=LIKE_ESCAPE))
            .order_by(DailyNote.note_date.desc())
            .limit(limit)
            .all()
        )
