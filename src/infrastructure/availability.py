"""Per-request backend availability."""

from domain.services.backend_policy import BackendAvailability
from infrastructure.database.connectivity import ConnectionMonitor


class BackendProbe:
    """IAvailabilityProbe from startup flags plus the live connection state.

    The Firebase flags are fixed for the process lifetime. The record-store
    flag is read from the monitor on every call, so a snapshot taken after
    a reconnect already sees it.
    """

    def __init__(
        self,
        monitor: ConnectionMonitor,
        identity_provider: bool,
        document_store: bool,
    ) -> None:
        self._monitor = monitor
        self._identity_provider = identity_provider
        self._document_store = document_store

    def snapshot(self) -> BackendAvailability:
        return BackendAvailability(
            identity_provider=self._identity_provider,
            document_store=self._document_store,
            record_store=self._monitor.is_connected,
        )
