"""Health check endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from api.dependencies.services import get_connection_monitor, get_firebase
from api.schemas.common import CamelModel
from core.config import settings
from infrastructure.database.connectivity import ConnectionMonitor
from infrastructure.firebase import FirebaseHandles

router = APIRouter(tags=["health"])

VERSION = "1.0.0"


class HealthResponse(CamelModel):
    """Health check response."""

    status: str
    version: str
    environment: str
    firebase_api_key_present: bool
    identity_provider_initialized: bool
    document_store_initialized: bool
    record_store_state: str
    timestamp: str


@router.get("/", response_class=PlainTextResponse, include_in_schema=False)
async def root() -> str:
    return f"{settings.app_name} is running"


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health_check(
    monitor: ConnectionMonitor = Depends(get_connection_monitor),
    firebase: FirebaseHandles = Depends(get_firebase),
) -> HealthResponse:
    """
    Report configuration and backend state.

    Read-only: never touches a backend, so it stays fast when they are down.
    """
    return HealthResponse(
        status="ok",
        version=VERSION,
        environment=settings.app_env,
        firebase_api_key_present=settings.firebase_api_key_present,
        identity_provider_initialized=firebase.identity_initialized,
        document_store_initialized=firebase.document_store_initialized,
        record_store_state=monitor.state.value,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
