"""Search history repository"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Client, SearchHistory
from ...shared.dates import utcnow
from ...shared.queries import LIKE_ESCAPE, prefix_pattern


class SearchRepository:
    """Repository for per-agent search history"""

    @staticmethod
    def record_term(db: Session, agent_id: str, term: str) -> SearchHistory:
        """Upsert on (agent_id, search_term), bumping the counter"""
        entry = (
            db.query(SearchHistory)
            .filter(SearchHistory.agent_id == agent_id, SearchHistory.search_term == term)
            .first()
        )
        if entry:
            entry.search_count += 1
            entry.last_searched = utcnow()
        else:
            entry = SearchHistory(agent_id=agent_id, search_term=term, search_count=1, last_searched=utcnow())
            db.add(entry)
        db.commit()
        db.refresh(entry)
        return entry

    @staticmethod
    def get_history(db: Session, agent_id: str, limit: int = 20) -> list[SearchHistory]:
        return (
            db.query(SearchHistory)
            .filter(SearchHistory.agent_id == agent_id)
            .order_by(SearchHistory.last_searched.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def get_popular(db: Session, agent_id: str, limit: int = 10) -> list[SearchHistory]:
        return (
            db.query(SearchHistory)
            .filter(SearchHistory.agent_id == agent_id)
            .order_by(SearchHistory.search_count.desc(), SearchHistory.last_searched.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def history_starting_with(db: Session, agent_id: str, prefix: str, limit: int) -> list[str]:
        rows = (
            db.query(SearchHistory.search_term)
            .filter(SearchHistory.agent_id == agent_id, SearchHistory.search_term.ilike(prefix_pattern(prefix), escape=LIKE_ESCAPE))
            .order_by(SearchHistory.search_count.desc())
            .limit(limit)
            .all()
        )
        return [row[0] for row in rows]

    @staticmethod
    def client_names_starting_with(db: Session, agent_id: str, prefix: str, limit: int) -> list[Client]:
        pattern = prefix_pattern(prefix)
        return (
            db.query(Client)
            .filter(
                Client.agent_id == agent_id,
                Client.is_active.is_(True),
                (Client.first_name.ilike(pattern, escape=LIKE_ESCAPE)) | (Client.surname.ilike(pattern, escape=LIKE_ESCAPE)) | (Client.last_name.ilike(pattern, escape=LIKE_ESCAPE)),
            )
            .order_by(Client.first_name)
            .limit(limit)
            .all()
        )

    @staticmethod
    def delete_history(db: Session, agent_id: str, search_history_id: Optional[str] = None) -> int:
        query = db.query(SearchHistory).filter(SearchHistory.agent_id == agent_id)
        if search_history_id:
            query = query.filter(SearchHistory.search_history_id == search_history_id)
        deleted = query.delete(synchronize_session=False)
        db.commit()
        return deleted
