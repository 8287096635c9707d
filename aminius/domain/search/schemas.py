"""Search schemas"""

from datetime import datetime
from typing import Optional

from ...shared.schemas import CamelModel


class SearchResult(CamelModel):
    entity_type: str
    entity_id: str
    title: str
    subtitle: Optional[str] = None
    detail1: Optional[str] = None
    detail2: Optional[str] = None
    status: Optional[str] = None


class SearchHistoryResponse(CamelModel):
    search_history_id: str
    search_term: str
    search_count: int
    last_searched: datetime
