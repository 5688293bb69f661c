"""Live record-store connection state with a background reconnect loop."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import StrEnum

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from infrastructure.database.models import Base

logger = logging.getLogger(__name__)

ConnectListener = Callable[[], Awaitable[object]]


class ConnectionState(StrEnum):
    """Record-store connection state as seen by request handlers."""

    CONNECTED = "connected"
    CONNECTING = "connecting"
    DISCONNECTED = "disconnected"


class ConnectionMonitor:
    """Tracks whether the record-store is reachable and keeps reconnecting.

    ``connect_with_retry`` pings the database until it answers, waiting a
    fixed delay between attempts. Each transition to connected runs the
    registered listeners in order. Record-store adapters call
    ``mark_disconnected`` when a query fails at the connection level,
    which drops the state and starts the loop again.
    """

    def __init__(self, engine: AsyncEngine, retry_seconds: float = 5.0) -> None:
        self._engine = engine
        self._retry_seconds = retry_seconds
        self._state = ConnectionState.DISCONNECTED
        self._listeners: list[ConnectListener] = []
        self._task: asyncio.Task[None] | None = None
        self._schema_ready = False

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    def add_listener(self, listener: ConnectListener) -> None:
        """Run ``listener`` after every transition to connected."""
        self._listeners.append(listener)

    def remove_listener(self, listener: ConnectListener) -> None:
        """Stop notifying ``listener``; unknown listeners are ignored."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def start(self) -> None:
        """Start the reconnect loop unless it is already running."""
        running = self._task is not None and not self._task.done()
        # A listener running inside the loop may report a fresh disconnect
        if running and self._task is not asyncio.current_task():
            return
        self._task = asyncio.create_task(self.connect_with_retry(), name="record-store-connect")

    async def stop(self) -> None:
        """Cancel the reconnect loop and release pooled connections."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        await self._engine.dispose()

    async def connect_with_retry(self) -> None:
        """Ping until the database answers, then notify listeners."""
        attempt = 0
        while True:
            attempt += 1
            self._state = ConnectionState.CONNECTING
            try:
                await self._ping()
            except (SQLAlchemyError, OSError) as e:
                self._state = ConnectionState.DISCONNECTED
                logger.warning(
                    "Record-store connection failed (attempt %d): %s. Retrying in %.1fs",
                    attempt,
                    e,
                    self._retry_seconds,
                )
                await asyncio.sleep(self._retry_seconds)
                continue
            break

        self._state = ConnectionState.CONNECTED
        logger.info("Connected to record-store after %d attempt(s)", attempt)
        await self._notify()

    def mark_disconnected(self, reason: str) -> None:
        """Record a lost connection and start reconnecting."""
        if self._state is not ConnectionState.CONNECTED:
            return
        logger.warning("Record-store marked disconnected: %s", reason)
        self._state = ConnectionState.DISCONNECTED
        self.start()

    async def _ping(self) -> None:
        async with self._engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            if not self._schema_ready:
                await conn.run_sync(Base.metadata.create_all)
        self._schema_ready = True

    async def _notify(self) -> None:
        for listener in self._listeners:
            try:
                await listener()
            except Exception:
                # Remaining listeners still run
                logger.exception("Record-store connect listener failed")
