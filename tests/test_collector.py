"""Tests for collecting anonymous data from the local store."""

import json

from jobseek_migration.collector import MigrationCollector
from jobseek_migration.errors import CollectionParseError
from jobseek_migration.storage.base import StorageKeys
from jobseek_migration.storage.memory import InMemoryStore, NullStore


def test_empty_store_has_no_anonymous_data(store):
    collector = MigrationCollector(store)

    assert collector.has_anonymous_data() is False
    bundle = collector.collect_bundle()
    assert bundle.total_items == 0
    assert bundle.is_empty


def test_anonymous_id_alone_counts_as_data():
    collector = MigrationCollector(InMemoryStore({StorageKeys.ANONYMOUS_ID: "anon-1"}))

    assert collector.has_anonymous_data() is True
    assert collector.get_anonymous_id() == "anon-1"


def test_empty_lists_are_not_data():
    collector = MigrationCollector(InMemoryStore({
        StorageKeys.SAVED_JOBS: "[]",
        StorageKeys.USER_PROFILE: "null",
    }))

    assert collector.has_anonymous_data() is False


def test_unreadable_category_is_not_data():
    collector = MigrationCollector(InMemoryStore({
        StorageKeys.USER_PROFILE: '["not", "object"]',
        StorageKeys.SAVED_JOBS: "{broken",
    }))

    assert collector.has_anonymous_data() is False
    assert collector.warnings == []


def test_collect_bundle_reads_every_category(seeded_store):
    bundle = MigrationCollector(seeded_store).collect_bundle()

    assert len(bundle.saved_jobs) == 3
    assert len(bundle.saved_searches) == 2
    assert len(bundle.applications) == 1
    assert len(bundle.job_boards) == 1
    assert len(bundle.search_results) == 1
    assert bundle.board_preferences == ["linkedin", "indeed"]
    assert bundle.profile.data["firstName"] == "Sam"
    assert bundle.anonymous_id == "anon-123"
    # 3 + 2 + 1 + 1 + 1 + 2 board ids + profile
    assert bundle.total_items == 11


def test_corrupt_category_does_not_abort_collection(seeded_store):
    seeded_store.set_item(StorageKeys.SAVED_SEARCHES, "{not json")
    collector = MigrationCollector(seeded_store)

    bundle = collector.collect_bundle()

    assert bundle.saved_searches == []
    assert len(bundle.saved_jobs) == 3
    assert len(collector.warnings) == 1
    warning = collector.warnings[0]
    assert isinstance(warning, CollectionParseError)
    assert warning.key == StorageKeys.SAVED_SEARCHES


def test_wrong_shape_is_a_parse_warning(seeded_store):
    seeded_store.set_item(StorageKeys.SAVED_JOBS, json.dumps({"jobId": "job-1"}))
    seeded_store.set_item(StorageKeys.USER_SAVED_BOARDS, json.dumps("linkedin"))
    collector = MigrationCollector(seeded_store)

    bundle = collector.collect_bundle()

    assert bundle.saved_jobs == []
    assert bundle.board_preferences == []
    assert {w.key for w in collector.warnings} == {
        StorageKeys.SAVED_JOBS,
        StorageKeys.USER_SAVED_BOARDS,
    }


def test_malformed_record_is_a_parse_warning(seeded_store):
    seeded_store.set_item(StorageKeys.APPLICATIONS, json.dumps([{"applicationId": "a"}, "oops"]))
    collector = MigrationCollector(seeded_store)

    bundle = collector.collect_bundle()

    assert bundle.applications == []
    assert collector.warnings[0].key == StorageKeys.APPLICATIONS


def test_duplicate_ids_keep_first_record():
    jobs = [
        {"jobId": "job-1", "title": "First", "company": "A"},
        {"jobId": "job-1", "title": "Second", "company": "A"},
    ]
    collector = MigrationCollector(InMemoryStore({StorageKeys.SAVED_JOBS: json.dumps(jobs)}))

    bundle = collector.collect_bundle()

    assert len(bundle.saved_jobs) == 1
    assert bundle.saved_jobs[0].data["title"] == "First"


def test_warnings_reset_between_collections(seeded_store):
    seeded_store.set_item(StorageKeys.SAVED_JOBS, "garbage")
    collector = MigrationCollector(seeded_store)
    collector.collect_bundle()
    assert collector.warnings

    seeded_store.set_item(StorageKeys.SAVED_JOBS, "[]")
    collector.collect_bundle()
    assert collector.warnings == []


def test_unavailable_store_yields_empty_bundle():
    collector = MigrationCollector(NullStore())

    assert collector.has_anonymous_data() is False
    assert collector.collect_bundle().is_empty
    assert collector.warnings == []


def test_preview_counts_and_size(seeded_store):
    collector = MigrationCollector(seeded_store)

    preview = collector.preview()

    assert preview.counts == {
        "savedJobs": 3,
        "savedSearches": 2,
        "applications": 1,
        "jobBoards": 1,
        "searchResults": 1,
        "boardPreferences": 2,
    }
    assert preview.has_profile is True
    bundle = collector.collect_bundle()
    assert preview.total_size_bytes == len(bundle.to_json().encode("utf-8"))
    assert preview.to_dict()["counts"]["hasProfile"] is True


def test_collection_has_no_side_effects(seeded_store):
    before = {k: seeded_store.get_item(k) for k in seeded_store.keys()}

    MigrationCollector(seeded_store).collect_bundle()

    assert {k: seeded_store.get_item(k) for k in seeded_store.keys()} == before
