"""Unit tests for application startup and shutdown."""

import pytest
from fastapi import FastAPI

import main
from api.dependencies import services
from domain.services.history_service import HistoryService
from infrastructure.database.connectivity import ConnectionMonitor
from infrastructure.firebase import FirebaseHandles
from infrastructure.memory.history_buffer import DegradedBuffer
from tests.fakes import InMemoryHistoryStore


@pytest.fixture
def wired(
    monkeypatch: pytest.MonkeyPatch, monitor: ConnectionMonitor, history_buffer: DegradedBuffer
) -> ConnectionMonitor:
    history_service = HistoryService(monitor, InMemoryHistoryStore(), history_buffer)
    monkeypatch.setattr(main, "get_firebase", FirebaseHandles)
    monkeypatch.setattr(main, "get_connection_monitor", lambda: monitor)
    monkeypatch.setattr(main, "get_history_service", lambda: history_service)
    return monitor


class TestLifespan:
    """Tests for the lifespan manager."""

    @pytest.mark.asyncio
    async def test_restart_registers_one_flush_listener(self, wired: ConnectionMonitor):
        app = FastAPI()

        for _ in range(2):
            async with main.lifespan(app):
                assert len(wired._listeners) == 1
            assert wired._listeners == []

    @pytest.mark.asyncio
    async def test_shutdown_clears_cached_dependencies(self, wired: ConnectionMonitor):
        services.get_password_hasher()
        assert services.get_password_hasher.cache_info().currsize == 1

        async with main.lifespan(FastAPI()):
            pass

        assert services.get_password_hasher.cache_info().currsize == 0
