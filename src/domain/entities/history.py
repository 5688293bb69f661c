"""Lookup history domain entity."""

from dataclasses import dataclass, field, replace
from datetime import datetime

from core.ids import local_id
from domain.entities.profile import utcnow


@dataclass
class HistoryEntry:
    """One recorded word lookup.

    ``buffered`` is true while the entry only lives in the in-process
    buffer and flips to false exactly once, when it is stored durably.
    """

    owner_id: str
    term: str
    result_text: str
    secondary_text: str | None = None
    id: str = field(default_factory=local_id)
    created_at: datetime = field(default_factory=utcnow)
    buffered: bool = False

    def as_durable(self) -> "HistoryEntry":
        """Copy for durable storage; the store assigns a fresh id."""
        return replace(self, id="", buffered=False)
