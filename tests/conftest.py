"""Shared fixtures for the migration tests."""

import json

import pytest

from jobseek_migration.services.repository import InMemoryRepository
from jobseek_migration.storage.base import StorageKeys
from jobseek_migration.storage.memory import InMemoryStore

ANONYMOUS_ID = "anon-123"

SAVED_JOBS = [
    {"jobId": "job-1", "title": "Backend Engineer", "company": "Acme", "savedAt": "2024-05-01T10:00:00Z"},
    {"jobId": "job-2", "title": "Data Engineer", "company": "Globex"},
    {"jobId": "job-3", "title": "SRE", "company": "Initech", "tags": ["remote"]},
]

SAVED_SEARCHES = [
    {"searchId": "search-1", "name": "Python remote", "keywords": "python"},
    {"searchId": "search-2", "name": "Go in Berlin", "location": "Berlin", "frequency": "daily"},
]

APPLICATIONS = [
    {"applicationId": "app-1", "jobId": "job-1", "status": "applied", "company": "Acme"},
]

JOB_BOARDS = [
    {"boardId": "board-1", "name": "Favourites", "jobIds": ["job-1", "job-2"]},
]

SEARCH_RESULTS = [
    {"searchSessionId": "session-1", "jobs": [{"title": "SRE"}], "status": "completed", "totalJobsFound": 1},
]

PROFILE = {"firstName": "Sam", "email": "sam@example.com", "skills": ["python"]}


@pytest.fixture()
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture()
def repository() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture()
def seeded_store() -> InMemoryStore:
    """Store holding one of everything an anonymous session can accumulate."""
    return InMemoryStore({
        StorageKeys.SAVED_JOBS: json.dumps(SAVED_JOBS),
        StorageKeys.SAVED_SEARCHES: json.dumps(SAVED_SEARCHES),
        StorageKeys.APPLICATIONS: json.dumps(APPLICATIONS),
        StorageKeys.JOB_BOARDS: json.dumps(JOB_BOARDS),
        StorageKeys.SEARCH_RESULTS: json.dumps(SEARCH_RESULTS),
        StorageKeys.USER_SAVED_BOARDS: json.dumps(["linkedin", "indeed"]),
        StorageKeys.USER_PROFILE: json.dumps(PROFILE),
        StorageKeys.ANONYMOUS_ID: ANONYMOUS_ID,
    })
