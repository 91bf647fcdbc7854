"""Tests for the JSON file store."""

import json

from jobseek_migration.collector import MigrationCollector
from jobseek_migration.storage.base import StorageKeys
from jobseek_migration.storage.file_store import FileStore


def test_values_persist_across_instances(tmp_path):
    path = tmp_path / "store.json"
    FileStore(path).set_item(StorageKeys.ANONYMOUS_ID, "anon-1")

    store = FileStore(path)

    assert store.get_item(StorageKeys.ANONYMOUS_ID) == "anon-1"
    assert store.keys() == [StorageKeys.ANONYMOUS_ID]


def test_remove_items(tmp_path):
    store = FileStore(tmp_path / "store.json")
    store.set_item("a", "1")
    store.set_item("b", "2")
    store.set_item("c", "3")

    store.remove_items(["a", "c", "missing"])

    assert store.keys() == ["b"]


def test_non_string_values_are_exposed_as_json(tmp_path):
    path = tmp_path / "store.json"
    path.write_text(json.dumps({StorageKeys.SAVED_JOBS: [{"jobId": "j1", "title": "T", "company": "C"}]}))

    bundle = MigrationCollector(FileStore(path)).collect_bundle()

    assert [r.id for r in bundle.saved_jobs] == ["j1"]


def test_corrupt_file_reads_as_empty(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{broken")

    store = FileStore(path)

    assert store.get_item(StorageKeys.SAVED_JOBS) is None
    assert MigrationCollector(store).has_anonymous_data() is False


def test_write_sets_corrupt_file_aside(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{broken")
    store = FileStore(path)

    store.set_item(StorageKeys.MIGRATION_STATUS, "in_progress")

    assert store.keys() == [StorageKeys.MIGRATION_STATUS]
    kept = list(tmp_path.glob("store.json.corrupt-*"))
    assert len(kept) == 1
    assert kept[0].read_text() == "{broken"


def test_reads_leave_corrupt_file_in_place(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("[1, 2]")

    FileStore(path).remove_item(StorageKeys.SAVED_JOBS)

    assert path.read_text() == "[1, 2]"
    assert list(tmp_path.glob("store.json.corrupt-*")) == []


def test_availability_check_creates_nothing(tmp_path):
    directory = tmp_path / "nested" / "dir"
    store = FileStore(directory / "store.json")

    assert store.available is True
    assert not (tmp_path / "nested").exists()
    assert MigrationCollector(store).collect_bundle().is_empty
    assert not (tmp_path / "nested").exists()


def test_creates_parent_directory_on_first_write(tmp_path):
    store = FileStore(tmp_path / "nested" / "dir" / "store.json")

    store.set_item("k", "v")

    assert (tmp_path / "nested" / "dir" / "store.json").exists()


def test_unwritable_location_is_unavailable(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("")

    assert FileStore(blocker / "store.json").available is False
