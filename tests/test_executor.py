"""Tests for the migration executor."""

import asyncio
import json

import pytest

from jobseek_migration.boundary.base import BoundaryResponse, PersistenceBoundary
from jobseek_migration.boundary.local import InProcessBoundary
from jobseek_migration.errors import (
    MigrationInProgressError,
    NotAuthenticatedError,
    TransportError,
)
from jobseek_migration.models.migration import MigratedCounts, MigrationStatus
from jobseek_migration.models.record import RecordCategory, UserRecord
from jobseek_migration.orchestrator import MigrationExecutor
from jobseek_migration.services.reconciler import MigrationReconciler
from jobseek_migration.storage.base import StorageKeys
from jobseek_migration.storage.memory import InMemoryStore


class RaisingBoundary(PersistenceBoundary):
    def __init__(self, error):
        self.error = error

    async def submit(self, user_id, bundle, version, on_progress=None):
        raise self.error


class SlowBoundary(PersistenceBoundary):
    def __init__(self):
        self.release = asyncio.Event()

    async def submit(self, user_id, bundle, version, on_progress=None):
        await self.release.wait()
        return BoundaryResponse(success=True, migrated=MigratedCounts(saved_jobs=1))


def jobs_store(count):
    jobs = [{"jobId": f"job-{i}", "title": "Engineer", "company": "Acme"} for i in range(1, count + 1)]
    return InMemoryStore({StorageKeys.SAVED_JOBS: json.dumps(jobs)})


def executor_for(store, repository):
    return MigrationExecutor(store, InProcessBoundary(MigrationReconciler(repository)))


@pytest.mark.asyncio
async def test_three_saved_jobs_migrate_cleanly(repository):
    store = jobs_store(3)
    executor = executor_for(store, repository)

    result = await executor.migrate("user-1")

    assert result.success is True
    assert result.errors == []
    assert result.migrated.to_dict() == {
        "savedJobs": 3,
        "savedSearches": 0,
        "applications": 0,
        "jobBoards": 0,
        "searchResults": 0,
        "profile": False,
    }
    assert store.get_item(StorageKeys.SAVED_JOBS) is None
    assert executor.tracker.get_status() == MigrationStatus.COMPLETED


@pytest.mark.asyncio
async def test_partial_failure_keeps_local_data(repository):
    searches = [{"searchId": "s1", "name": "Python"}, {"searchId": "s2"}]
    store = InMemoryStore({StorageKeys.SAVED_SEARCHES: json.dumps(searches)})
    executor = executor_for(store, repository)

    result = await executor.migrate("user-1")

    assert result.success is False
    assert result.migrated.saved_searches == 1
    assert result.errors == ["Search s2: name: Required field is missing"]
    assert executor.tracker.get_status() == MigrationStatus.FAILED
    assert json.loads(store.get_item(StorageKeys.SAVED_SEARCHES)) == searches
    assert executor.get_last_result() is None


@pytest.mark.asyncio
async def test_failed_attempt_can_be_retried(repository):
    searches = [{"searchId": "s1", "name": "Python"}, {"searchId": "s2"}]
    store = InMemoryStore({StorageKeys.SAVED_SEARCHES: json.dumps(searches)})
    executor = executor_for(store, repository)
    await executor.migrate("user-1")

    searches[1]["name"] = "Go"
    store.set_item(StorageKeys.SAVED_SEARCHES, json.dumps(searches))
    result = await executor.migrate("user-1")

    assert result.success is True
    assert executor.tracker.get_status() == MigrationStatus.COMPLETED
    assert len(repository.list_records("user-1", RecordCategory.SAVED_SEARCHES)) == 2


@pytest.mark.asyncio
async def test_sweep_counts_server_side_results(repository):
    for i in range(1, 6):
        repository.put_anonymous_record(
            "anon-1",
            UserRecord(RecordCategory.SEARCH_RESULTS, {"searchSessionId": f"r{i}"}),
        )
    store = InMemoryStore({StorageKeys.ANONYMOUS_ID: "anon-1"})
    executor = executor_for(store, repository)

    result = await executor.migrate("user-1")

    assert result.success is True
    assert result.migrated.search_results == 5
    assert store.get_item(StorageKeys.ANONYMOUS_ID) is None


@pytest.mark.asyncio
@pytest.mark.parametrize("user_id", ["", None])
async def test_unauthenticated_leaves_status_untouched(seeded_store, repository, user_id):
    seeded_store.set_item(StorageKeys.MIGRATION_STATUS, "failed")
    executor = executor_for(seeded_store, repository)

    with pytest.raises(NotAuthenticatedError):
        await executor.migrate(user_id)

    assert seeded_store.get_item(StorageKeys.MIGRATION_STATUS) == "failed"
    assert len(repository) == 0


@pytest.mark.asyncio
async def test_success_clears_every_data_key_and_stores_result(seeded_store, repository):
    executor = executor_for(seeded_store, repository)
    updates = []

    result = await executor.migrate("user-1", on_progress=updates.append)

    assert result.success is True
    for key in StorageKeys.data_keys():
        assert seeded_store.get_item(key) is None
    assert seeded_store.get_item(StorageKeys.MIGRATION_VERSION) == "1.0.0"
    assert updates[-1].processed_items == updates[-1].total_items == 11

    last = executor.get_last_result()
    assert last.success is True
    assert last.migrated.saved_jobs == 3
    assert last.migrated.profile is True


@pytest.mark.asyncio
async def test_transport_error_fails_attempt(seeded_store):
    executor = MigrationExecutor(seeded_store, RaisingBoundary(TransportError("HTTP 502", 502)))

    result = await executor.migrate("user-1")

    assert result.success is False
    assert result.errors == ["HTTP 502"]
    assert executor.tracker.get_status() == MigrationStatus.FAILED
    assert seeded_store.get_item(StorageKeys.SAVED_JOBS) is not None


@pytest.mark.asyncio
async def test_unexpected_error_becomes_one_error_string(seeded_store):
    executor = MigrationExecutor(seeded_store, RaisingBoundary(KeyError("boom")))

    result = await executor.migrate("user-1")

    assert result.success is False
    assert len(result.errors) == 1
    assert result.errors[0].startswith("Migration failed:")
    assert executor.tracker.get_status() == MigrationStatus.FAILED


@pytest.mark.asyncio
async def test_empty_store_is_a_no_op(store):
    boundary = RaisingBoundary(AssertionError("boundary must not be called"))
    executor = MigrationExecutor(store, boundary)

    result = await executor.migrate("user-1")

    assert result.success is True
    assert result.migrated.total == 0
    assert store.get_item(StorageKeys.MIGRATION_STATUS) is None


@pytest.mark.asyncio
async def test_concurrent_migrate_is_rejected(seeded_store):
    boundary = SlowBoundary()
    executor = MigrationExecutor(seeded_store, boundary)

    first = asyncio.create_task(executor.migrate("user-1"))
    await asyncio.sleep(0)
    assert executor.running is True

    with pytest.raises(MigrationInProgressError):
        await executor.migrate("user-1")

    boundary.release.set()
    result = await first
    assert result.success is True
    assert executor.running is False


@pytest.mark.asyncio
async def test_migrating_same_bundle_twice_gives_same_counts(repository):
    store = jobs_store(2)
    executor = executor_for(store, repository)
    bundle = executor.collector.collect_bundle()

    first = await executor.migrate("user-1", bundle)
    second = await executor.migrate("user-1", bundle)

    assert first.success is second.success is True
    assert second.migrated == first.migrated
    assert second.migrated.saved_jobs == 2
    assert len(repository) == 2
    assert executor.tracker.get_status() == MigrationStatus.COMPLETED


@pytest.mark.asyncio
async def test_skipped_session_can_still_migrate_explicitly(seeded_store, repository):
    executor = executor_for(seeded_store, repository)
    executor.tracker.skip()

    result = await executor.migrate("user-1")

    assert result.success is True
    assert result.migrated.saved_jobs == 3
    assert executor.tracker.get_status() == MigrationStatus.SKIPPED
    assert seeded_store.get_item(StorageKeys.SAVED_JOBS) is None


@pytest.mark.asyncio
async def test_unreadable_only_category_settles_prompt(repository):
    store = InMemoryStore({StorageKeys.USER_PROFILE: '["not", "object"]'})
    executor = executor_for(store, repository)

    result = await executor.migrate("user-1")

    assert result.success is True
    assert executor.tracker.should_prompt() is False
    assert executor.tracker.get_status() == MigrationStatus.COMPLETED
    assert len(repository) == 0
