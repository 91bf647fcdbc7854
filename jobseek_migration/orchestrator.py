"""Migration executor - coordinates one anonymous-to-authenticated migration."""

import json
import logging
from typing import Optional

from .boundary.base import PersistenceBoundary
from .boundary.http_boundary import HTTPPersistenceBoundary
from .boundary.local import InProcessBoundary
from .collector import MigrationCollector
from .config import Settings
from .errors import MigrationInProgressError, NotAuthenticatedError, TransportError
from .models.migration import (
    MigrationBundle,
    MigrationResult,
    MigrationStatus,
    ProgressCallback,
)
from .services.dynamodb import DynamoDBRepository
from .services.reconciler import MigrationReconciler
from .services.repository import InMemoryRepository
from .status import StatusTracker
from .storage.base import LocalAnonymousStore, StorageKeys

logger = logging.getLogger(__name__)


class MigrationExecutor:
    """
    Runs a migration attempt for one browser session.

    Handles:
    - Collecting the bundle from the local store
    - Status tracking around the attempt
    - Submitting the bundle to the persistence boundary
    - Clearing local data once the boundary reports success
    - Persisting the last result
    """

    def __init__(
        self,
        store: LocalAnonymousStore,
        boundary: PersistenceBoundary,
        collector: Optional[MigrationCollector] = None,
        tracker: Optional[StatusTracker] = None,
        version: str = "1.0.0",
    ):
        """
        Initialize the executor.

        Args:
            store: Local anonymous store of this session
            boundary: Where the bundle is written
            collector: Collector over ``store``
            tracker: Status tracker over ``store``
            version: Bundle format version sent with each attempt
        """
        self.store = store
        self.boundary = boundary
        self.collector = collector or MigrationCollector(store)
        self.tracker = tracker or StatusTracker(store, self.collector)
        self.version = version
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def migrate(
        self,
        user_id: str,
        bundle: Optional[MigrationBundle] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> MigrationResult:
        """
        Migrate the session's anonymous data to ``user_id``.

        Args:
            user_id: Authenticated user id
            bundle: Bundle to submit; collected from the store when omitted
            on_progress: Called after each non-empty category

        Returns:
            MigrationResult; ``success`` is False on partial or total failure

        Raises:
            NotAuthenticatedError: if user_id is empty
            MigrationInProgressError: if an attempt is already running
        """
        if not user_id or not str(user_id).strip():
            raise NotAuthenticatedError()
        if self._running:
            raise MigrationInProgressError("A migration is already in progress")

        self._running = True
        try:
            return await self._run(user_id, bundle, on_progress)
        finally:
            self._running = False

    async def _run(
        self,
        user_id: str,
        bundle: Optional[MigrationBundle],
        on_progress: Optional[ProgressCallback],
    ) -> MigrationResult:
        if bundle is None:
            bundle = self.collector.collect_bundle()

        if bundle.is_empty:
            logger.info("No anonymous data to migrate")
            return MigrationResult(success=True)

        # Writes are upserts, so a settled session can re-apply a bundle
        # without leaving its sticky status
        settled = self.tracker.is_settled()
        if settled:
            logger.info(f"Migration status is {self.tracker.get_status().value}, re-applying bundle")
        else:
            self.tracker.set_status(MigrationStatus.IN_PROGRESS)
        result = MigrationResult()

        try:
            logger.info(f"=== MIGRATING {bundle.total_items} ITEMS FOR {user_id} ===")
            response = await self.boundary.submit(user_id, bundle, self.version, on_progress)

            result.migrated = response.migrated
            result.errors = list(response.errors)
            result.warnings = list(response.warnings)
            result.success = response.success

        except TransportError as e:
            logger.error(f"Migration failed: {e}")
            result.errors.append(str(e))
            result.success = False

        except Exception as e:
            logger.exception(f"Migration failed unexpectedly: {e}")
            result.errors.append(f"Migration failed: {e}")
            result.success = False

        if result.success:
            self._clear_local_data()
            if not settled:
                self.tracker.set_status(MigrationStatus.COMPLETED)
            self._save_result(result)
            logger.info("=== MIGRATION COMPLETED ===")
        else:
            if not settled:
                self.tracker.set_status(MigrationStatus.FAILED)
            logger.warning(f"Migration finished with {len(result.errors)} errors, local data kept")

        return result

    def _clear_local_data(self) -> None:
        self.store.remove_items(StorageKeys.data_keys())
        logger.info("Cleared migrated anonymous data")

    def _save_result(self, result: MigrationResult) -> None:
        self.store.set_item(StorageKeys.MIGRATION_RESULT, json.dumps(result.to_dict()))
        self.store.set_item(StorageKeys.MIGRATION_VERSION, self.version)

    def get_last_result(self) -> Optional[MigrationResult]:
        """The result persisted by the last successful migration, if any."""
        raw = self.store.get_item(StorageKeys.MIGRATION_RESULT)
        if not raw:
            return None

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring unreadable last migration result: {e}")
            return None

        if not isinstance(data, dict):
            return None
        return MigrationResult.from_dict(data)


def build_executor(
    settings: Settings,
    store: LocalAnonymousStore,
    mode: str = "http",
    auth_token: Optional[str] = None,
) -> MigrationExecutor:
    """
    Wire an executor from settings.

    Args:
        settings: Runtime settings
        store: Local anonymous store
        mode: "http" posts to the migrate endpoint, "table" writes to
            DynamoDB in process, "memory" writes to an in-memory repository
        auth_token: Bearer token for the HTTP endpoint

    Returns:
        MigrationExecutor ready to run
    """
    if mode == "http":
        boundary: PersistenceBoundary = HTTPPersistenceBoundary.from_settings(settings, auth_token)
    elif mode == "table":
        boundary = InProcessBoundary(MigrationReconciler(DynamoDBRepository.from_settings(settings)))
    elif mode == "memory":
        boundary = InProcessBoundary(MigrationReconciler(InMemoryRepository()))
    else:
        raise ValueError(f"Unknown boundary mode: {mode}")

    return MigrationExecutor(store, boundary, version=settings.migration_version)
