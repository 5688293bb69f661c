"""Unit tests for the record-store connection monitor."""

import asyncio
import logging

import pytest
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from infrastructure.database.connectivity import ConnectionMonitor, ConnectionState


class TestConnectWithRetry:
    """Tests for the connect loop."""

    @pytest.mark.asyncio
    async def test_connects_and_creates_schema(self, engine: AsyncEngine):
        monitor = ConnectionMonitor(engine, retry_seconds=0.01)
        assert monitor.state is ConnectionState.DISCONNECTED

        await monitor.connect_with_retry()

        assert monitor.is_connected
        async with engine.connect() as conn:
            tables = await conn.run_sync(lambda sync: inspect(sync).get_table_names())
        assert {"users", "history"} <= set(tables)

    @pytest.mark.asyncio
    async def test_retries_until_reachable(self, tmp_path):
        # The directory does not exist yet, so the first attempts fail
        db_dir = tmp_path / "later"
        engine = create_async_engine(f"sqlite+aiosqlite:///{db_dir / 'app.db'}")
        monitor = ConnectionMonitor(engine, retry_seconds=0.01)

        task = asyncio.create_task(monitor.connect_with_retry())
        await asyncio.sleep(0.05)
        assert not monitor.is_connected
        assert not task.done()

        db_dir.mkdir()
        await asyncio.wait_for(task, timeout=5)

        assert monitor.is_connected
        await engine.dispose()

    @pytest.mark.asyncio
    async def test_listeners_run_on_connect(self, engine: AsyncEngine):
        monitor = ConnectionMonitor(engine, retry_seconds=0.01)
        calls: list[str] = []

        async def first() -> None:
            calls.append("first")

        async def second() -> None:
            calls.append("second")

        monitor.add_listener(first)
        monitor.add_listener(second)
        await monitor.connect_with_retry()

        assert calls == ["first", "second"]

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_stop_others(
        self, engine: AsyncEngine, caplog: pytest.LogCaptureFixture
    ):
        monitor = ConnectionMonitor(engine, retry_seconds=0.01)
        calls: list[str] = []

        async def broken() -> None:
            raise RuntimeError("boom")

        async def healthy() -> None:
            calls.append("healthy")

        monitor.add_listener(broken)
        monitor.add_listener(healthy)
        with caplog.at_level(logging.ERROR):
            await monitor.connect_with_retry()

        assert calls == ["healthy"]
        assert "listener failed" in caplog.text


class TestMarkDisconnected:
    """Tests for dropping and recovering the connection."""

    @pytest.mark.asyncio
    async def test_reconnects_in_background(self, engine: AsyncEngine):
        monitor = ConnectionMonitor(engine, retry_seconds=0.01)
        await monitor.connect_with_retry()
        reconnected = asyncio.Event()

        async def on_connect() -> None:
            reconnected.set()

        monitor.add_listener(on_connect)
        monitor.mark_disconnected("socket closed")

        assert not monitor.is_connected
        await asyncio.wait_for(reconnected.wait(), timeout=5)
        assert monitor.is_connected
        await monitor.stop()

    @pytest.mark.asyncio
    async def test_ignored_when_not_connected(self, engine: AsyncEngine):
        monitor = ConnectionMonitor(engine, retry_seconds=0.01)

        monitor.mark_disconnected("never connected")

        assert monitor.state is ConnectionState.DISCONNECTED

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self, engine: AsyncEngine):
        monitor = ConnectionMonitor(engine, retry_seconds=0.01)
        connects = 0

        async def count() -> None:
            nonlocal connects
            connects += 1

        monitor.add_listener(count)
        monitor.start()
        monitor.start()
        await asyncio.sleep(0.1)

        assert connects == 1
        await monitor.stop()
