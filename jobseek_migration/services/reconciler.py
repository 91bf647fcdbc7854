"""Writes a migration bundle into the user data repository."""

import asyncio
import logging
from typing import List, Optional, Tuple

from ..errors import AnonymousSweepError, ItemWriteError, NotAuthenticatedError
from ..models.migration import (
    MigrationBundle,
    MigrationProgress,
    MigrationResult,
    ProgressCallback,
)
from ..models.record import MIGRATION_ORDER, RecordCategory, UserRecord
from .repository import UserDataRepository
from .validator import RecordValidator

logger = logging.getLogger(__name__)


class MigrationReconciler:
    """
    Moves every record of a bundle under an authenticated user.

    Categories are written one after another in a fixed order; records
    inside a category are written concurrently and all of them are allowed
    to settle, so one failing record never stops its siblings. Writes are
    upserts, so running the same bundle twice leaves the same data behind.
    """

    def __init__(
        self,
        repository: UserDataRepository,
        validator: Optional[RecordValidator] = None,
    ):
        """
        Initialize the reconciler.

        Args:
            repository: Authoritative store to write into
            validator: Record validator; defaults to the built-in schemas
        """
        self.repository = repository
        self.validator = validator or RecordValidator()

    async def reconcile(
        self,
        user_id: str,
        bundle: MigrationBundle,
        on_progress: Optional[ProgressCallback] = None,
    ) -> MigrationResult:
        """
        Write a bundle for a user.

        Args:
            user_id: Authenticated user id
            bundle: Records collected from the anonymous session
            on_progress: Called after each non-empty category

        Returns:
            MigrationResult with per-category counts and error strings

        Raises:
            NotAuthenticatedError: if user_id is empty
        """
        if not user_id or not str(user_id).strip():
            raise NotAuthenticatedError()

        result = MigrationResult()
        failures: List[str] = []
        total = bundle.total_items
        processed = 0
        logger.info(f"Migrating {total} items for user {user_id}")

        for category in MIGRATION_ORDER:
            size = bundle.category_size(category)
            if size == 0:
                continue

            if category == RecordCategory.BOARD_PREFERENCES:
                written, errors = await self._write_board_preferences(user_id, bundle.board_preferences)
            elif category == RecordCategory.PROFILE:
                written, errors = await self._write_records(user_id, [bundle.profile])
            else:
                written, errors = await self._write_records(user_id, bundle.records(category))

            result.migrated.add(category, written)
            result.errors.extend(errors)
            failures.extend(errors)
            processed += size

            logger.info(f"{category.value}: {written}/{size} written")
            if on_progress:
                on_progress(MigrationProgress.create(total, processed, category.value))

        if bundle.anonymous_id:
            await self._sweep(user_id, bundle, result)

        # Sweep errors are listed in errors but never decide success
        result.success = not failures
        logger.info(
            f"Migration for user {user_id} finished: "
            f"{result.migrated.total} migrated, {len(result.errors)} errors"
        )
        return result

    async def _write_records(self, user_id: str, records: List[UserRecord]) -> Tuple[int, List[str]]:
        """Write records concurrently; returns the success count and error strings."""
        outcomes = await asyncio.gather(
            *(asyncio.to_thread(self._write_one, user_id, record) for record in records),
            return_exceptions=True,
        )

        written = 0
        errors = []
        for record, outcome in zip(records, outcomes):
            if isinstance(outcome, Exception):
                error = ItemWriteError(record.category.label, record.id, str(outcome))
                logger.error(f"Failed to write record: {error.describe()}")
                errors.append(error.describe())
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                written += 1
        return written, errors

    def _write_one(self, user_id: str, record: UserRecord) -> None:
        self.validator.check(record)
        self.repository.put_record(user_id, record)

    async def _write_board_preferences(self, user_id: str, board_ids: List[str]) -> Tuple[int, List[str]]:
        try:
            await asyncio.to_thread(self.repository.save_board_preferences, user_id, board_ids)
        except Exception as e:
            error = ItemWriteError(RecordCategory.BOARD_PREFERENCES.label, None, str(e))
            logger.error(f"Failed to write record: {error.describe()}")
            return 0, [error.describe()]
        return len(board_ids), []

    async def _sweep(self, user_id: str, bundle: MigrationBundle, result: MigrationResult) -> None:
        """
        Migrate server-side records written under the anonymous id.

        Failures here are best effort: they are reported in both ``errors``
        and ``warnings`` and do not fail the migration.
        """
        anonymous_id = bundle.anonymous_id
        known = {r.id for r in bundle.search_results if r.id}

        try:
            found = await asyncio.to_thread(self.repository.get_search_results_by_anonymous_id, anonymous_id)
        except Exception as e:
            self._sweep_failed(result, AnonymousSweepError(f"Failed to migrate anonymous search results: {e}"))
        else:
            pending = [r for r in found if r.id not in known]
            written, errors = await self._write_records(user_id, pending)
            result.migrated.add(RecordCategory.SEARCH_RESULTS, written)
            for message in errors:
                self._sweep_failed(result, AnonymousSweepError(message))
            if pending:
                logger.info(f"Swept {written}/{len(pending)} anonymous search results for {anonymous_id}")

        try:
            masters = await asyncio.to_thread(self.repository.get_master_searches_by_anonymous_id, anonymous_id)
        except Exception as e:
            self._sweep_failed(result, AnonymousSweepError(f"Failed to migrate anonymous master searches: {e}"))
        else:
            written, errors = await self._write_records(user_id, masters)
            for message in errors:
                self._sweep_failed(result, AnonymousSweepError(message))
            if masters:
                logger.info(f"Swept {written}/{len(masters)} anonymous master searches for {anonymous_id}")

    def _sweep_failed(self, result: MigrationResult, error: AnonymousSweepError) -> None:
        logger.warning(f"Anonymous sweep: {error}")
        result.errors.append(str(error))
        result.warnings.append(str(error))
