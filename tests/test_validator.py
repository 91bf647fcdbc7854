"""Tests for record validation."""

import pytest

from jobseek_migration.errors import RecordValidationError
from jobseek_migration.models.record import RecordCategory, UserRecord
from jobseek_migration.services.validator import RecordValidator


@pytest.fixture()
def validator():
    return RecordValidator()


def test_valid_job(validator):
    record = UserRecord(RecordCategory.SAVED_JOBS, {
        "jobId": "j1", "title": "SRE", "company": "Acme", "savedAt": "2024-05-01T10:00:00Z",
    })

    assert validator.validate_record(record) == []


def test_missing_required_fields(validator):
    record = UserRecord(RecordCategory.SAVED_JOBS, {"jobId": "j1", "title": ""})

    issues = validator.validate_record(record)

    assert [i.field for i in issues] == ["title", "company"]
    assert all(i.message == "Required field is missing" for i in issues)


def test_invalid_application_status(validator):
    record = UserRecord(RecordCategory.APPLICATIONS, {
        "applicationId": "a1", "jobId": "j1", "status": "ghosted",
    })

    with pytest.raises(RecordValidationError) as exc_info:
        validator.check(record)

    assert exc_info.value.field == "status"
    assert "applied" in str(exc_info.value)


def test_type_checks(validator):
    record = UserRecord(RecordCategory.SEARCH_RESULTS, {
        "searchSessionId": "r1",
        "jobs": "not a list",
        "totalJobsFound": True,
        "createdAt": "not a date",
    })

    issues = {i.field: i for i in validator.validate_record(record)}

    assert set(issues) == {"jobs", "totalJobsFound", "createdAt"}
    assert issues["jobs"].message == "Invalid type. Expected array, got str"


def test_profile_has_no_required_fields(validator):
    assert validator.validate_record(UserRecord(RecordCategory.PROFILE, {})) == []
