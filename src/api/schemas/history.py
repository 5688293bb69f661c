"""Pydantic schemas for the history API."""

from datetime import datetime

from pydantic import ConfigDict

from api.schemas.common import CamelModel
from domain.entities.history import HistoryEntry


class HistoryCreate(CamelModel):
    """A lookup to record. Presence is checked by the service."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "word": "kape",
                "pilosopoAnswer": "Something you drink, obviously.",
                "realMeaning": "coffee",
                "userId": "local-1700000000000-a1b2c3",
            }
        },
    )

    word: str | None = None
    pilosopo_answer: str | None = None
    real_meaning: str | None = None
    user_id: str | None = None


class HistoryResponse(CamelModel):
    """A recorded lookup; ``buffered`` is true until it is stored durably."""

    id: str
    user_id: str
    word: str
    pilosopo_answer: str
    real_meaning: str | None = None
    created_at: datetime
    buffered: bool = False

    @classmethod
    def from_entry(cls, entry: HistoryEntry) -> "HistoryResponse":
        return cls(
            id=entry.id,
            user_id=entry.owner_id,
            word=entry.term,
            pilosopo_answer=entry.result_text,
            real_meaning=entry.secondary_text,
            created_at=entry.created_at,
            buffered=entry.buffered,
        )
