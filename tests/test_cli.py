"""Tests for the command-line interface."""

import json

import pytest

from jobseek_migration.cli import main
from jobseek_migration.storage.base import StorageKeys
from jobseek_migration.storage.file_store import FileStore


@pytest.fixture()
def store_path(tmp_path):
    path = tmp_path / "store.json"
    store = FileStore(path)
    store.set_item(StorageKeys.SAVED_JOBS, json.dumps([
        {"jobId": "j1", "title": "SRE", "company": "Acme"},
        {"jobId": "j2", "title": "SWE", "company": "Acme"},
    ]))
    store.set_item(StorageKeys.USER_SAVED_BOARDS, json.dumps(["linkedin"]))
    return str(path)


def test_status(store_path, capsys):
    main(["status", "--store", store_path])

    out = capsys.readouterr().out
    assert "Status: pending" in out
    assert "Should prompt: True" in out


def test_preview(store_path, capsys):
    main(["preview", "--store", store_path])

    preview = json.loads(capsys.readouterr().out)
    assert preview["counts"]["savedJobs"] == 2
    assert preview["counts"]["boardPreferences"] == 1
    assert preview["counts"]["hasProfile"] is False


def test_migrate_in_memory_then_last_result(store_path, capsys):
    main(["migrate", "--store", store_path, "--user-id", "user-1", "--memory"])

    out = capsys.readouterr().out
    assert "MIGRATION COMPLETE" in out
    assert "[100%] boardPreferences (3/3)" in out
    assert FileStore(store_path).get_item(StorageKeys.SAVED_JOBS) is None

    main(["last-result", "--store", store_path])
    last = json.loads(capsys.readouterr().out)
    assert last["success"] is True
    assert last["migrated"]["savedJobs"] == 2


def test_skip_and_reset(store_path, capsys):
    main(["skip", "--store", store_path])
    main(["status", "--store", store_path])
    assert "Status: skipped" in capsys.readouterr().out

    main(["reset", "--store", store_path])
    main(["status", "--store", store_path])
    assert "Status: pending" in capsys.readouterr().out
