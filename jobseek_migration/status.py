"""Per-session migration status tracking."""

import logging
from typing import Dict, FrozenSet, Optional

from .collector import MigrationCollector
from .errors import InvalidStatusTransition
from .models.migration import MigrationStatus
from .storage.base import LocalAnonymousStore, StorageKeys

logger = logging.getLogger(__name__)

# Allowed transitions; completed and skipped are sticky until reset()
TRANSITIONS: Dict[MigrationStatus, FrozenSet[MigrationStatus]] = {
    MigrationStatus.PENDING: frozenset({
        MigrationStatus.IN_PROGRESS,
        MigrationStatus.SKIPPED,
    }),
    MigrationStatus.IN_PROGRESS: frozenset({
        MigrationStatus.IN_PROGRESS,
        MigrationStatus.COMPLETED,
        MigrationStatus.FAILED,
        MigrationStatus.SKIPPED,
    }),
    MigrationStatus.FAILED: frozenset({
        MigrationStatus.IN_PROGRESS,
        MigrationStatus.SKIPPED,
    }),
    MigrationStatus.COMPLETED: frozenset(),
    MigrationStatus.SKIPPED: frozenset(),
}


class StatusTracker:
    """
    Records whether this browser session was offered, or completed, migration.

    The status lives in the local anonymous store and is never sent to the
    server. ``in_progress`` left over from an interrupted attempt is treated
    as resumable.
    """

    def __init__(self, store: LocalAnonymousStore, collector: Optional[MigrationCollector] = None):
        self.store = store
        self.collector = collector or MigrationCollector(store)

    def _stored_status(self) -> Optional[MigrationStatus]:
        raw = self.store.get_item(StorageKeys.MIGRATION_STATUS)
        if not raw:
            return None
        try:
            return MigrationStatus(raw)
        except ValueError:
            logger.warning(f"Ignoring unknown stored migration status: {raw!r}")
            return None

    def get_status(self) -> MigrationStatus:
        """Current status, defaulting from whether there is anything to migrate."""
        status = self._stored_status()
        if status is not None:
            return status
        if self.collector.has_anonymous_data():
            return MigrationStatus.PENDING
        return MigrationStatus.COMPLETED

    def set_status(self, status: MigrationStatus) -> None:
        """
        Move to ``status``.

        Raises:
            InvalidStatusTransition: if the move is not allowed from the
                current stored status
        """
        status = MigrationStatus(status)
        current = self._stored_status() or MigrationStatus.PENDING

        if current != status and status not in TRANSITIONS[current]:
            raise InvalidStatusTransition(
                f"Cannot move migration status from {current.value} to {status.value}"
            )
        if current == status and current != MigrationStatus.IN_PROGRESS:
            return

        self.store.set_item(StorageKeys.MIGRATION_STATUS, status.value)
        logger.info(f"Migration status: {current.value} -> {status.value}")

    def is_settled(self) -> bool:
        """True once a sticky status (completed or skipped) has been stored."""
        status = self._stored_status()
        return status is not None and not TRANSITIONS[status]

    def skip(self) -> None:
        """Record that the user declined migration."""
        self.set_status(MigrationStatus.SKIPPED)

    def reset(self) -> None:
        """Forget the stored status, e.g. after local data was regenerated."""
        self.store.remove_item(StorageKeys.MIGRATION_STATUS)
        logger.info("Migration status reset")

    def should_prompt(self) -> bool:
        """Whether the user should be offered migration."""
        if not self.collector.has_anonymous_data():
            return False
        return self.get_status() in (
            MigrationStatus.PENDING,
            MigrationStatus.FAILED,
            MigrationStatus.IN_PROGRESS,
        )
