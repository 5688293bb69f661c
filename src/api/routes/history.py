"""Lookup history API routes."""

from fastapi import APIRouter, Depends, Query, Request, status

from api.dependencies.services import get_history_service
from api.schemas.common import ErrorResponse
from api.schemas.history import HistoryCreate, HistoryResponse
from domain.services.history_service import HistoryService

router = APIRouter(prefix="/api/history", tags=["history"])


@router.post(
    "",
    response_model=HistoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a lookup",
    responses={400: {"model": ErrorResponse, "description": "Missing fields or userId"}},
)
async def add_history(
    request: Request,
    body: HistoryCreate,
    service: HistoryService = Depends(get_history_service),
) -> HistoryResponse:
    """Record a lookup, buffering it in memory while the record-store is down."""
    entry = await service.append(
        owner_id=body.user_id,
        term=body.word,
        result_text=body.pilosopo_answer,
        secondary_text=body.real_meaning,
    )
    if entry.buffered:
        request.state.degraded = True
    return HistoryResponse.from_entry(entry)


@router.get(
    "",
    response_model=list[HistoryResponse],
    summary="List a user's lookups",
)
async def list_history(
    user_id: str | None = Query(None, alias="userId"),
    service: HistoryService = Depends(get_history_service),
) -> list[HistoryResponse]:
    """List buffered lookups first, then stored ones, each newest first.

    Without ``userId`` the list is empty.
    """
    entries = await service.list_for_owner(user_id)
    return [HistoryResponse.from_entry(e) for e in entries]
