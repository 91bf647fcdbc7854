"""Schema definitions for the user data record types."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional
from enum import Enum

from .record import RecordCategory


class FieldType(str, Enum):
    """Supported field types."""
    STRING = "string"
    INTEGER = "integer"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    DATETIME = "datetime"
    ENUM = "enum"
    OBJECT = "object"
    ARRAY = "array"


@dataclass
class FieldDefinition:
    """Definition of a field in a record schema."""
    name: str
    type: FieldType
    description: str = ""
    required: bool = False
    enum_values: Optional[List[str]] = None


@dataclass
class EntitySchema:
    """Schema for one record category."""
    category: RecordCategory
    description: str = ""
    fields: Dict[str, FieldDefinition] = field(default_factory=dict)


def _schema(category: RecordCategory, description: str, *fields: FieldDefinition) -> EntitySchema:
    return EntitySchema(
        category=category,
        description=description,
        fields={f.name: f for f in fields},
    )


APPLICATION_STATUSES = ["applied", "interviewing", "offered", "rejected", "withdrawn"]
SEARCH_RESULT_STATUSES = ["pending", "running", "completed", "error"]

RECORD_SCHEMAS: Dict[RecordCategory, EntitySchema] = {
    RecordCategory.SAVED_JOBS: _schema(
        RecordCategory.SAVED_JOBS,
        "A job posting the user bookmarked",
        FieldDefinition("jobId", FieldType.STRING, required=True),
        FieldDefinition("title", FieldType.STRING, required=True),
        FieldDefinition("company", FieldType.STRING, required=True),
        FieldDefinition("location", FieldType.STRING),
        FieldDefinition("salary", FieldType.STRING),
        FieldDefinition("url", FieldType.STRING),
        FieldDefinition("description", FieldType.STRING),
        FieldDefinition("source", FieldType.STRING),
        FieldDefinition("savedAt", FieldType.DATETIME),
        FieldDefinition("tags", FieldType.ARRAY),
        FieldDefinition("notes", FieldType.STRING),
    ),
    RecordCategory.SAVED_SEARCHES: _schema(
        RecordCategory.SAVED_SEARCHES,
        "A saved job search configuration",
        FieldDefinition("searchId", FieldType.STRING, required=True),
        FieldDefinition("name", FieldType.STRING, required=True),
        FieldDefinition("keywords", FieldType.STRING),
        FieldDefinition("location", FieldType.STRING),
        FieldDefinition("jobBoards", FieldType.ARRAY),
        FieldDefinition("filters", FieldType.OBJECT),
        FieldDefinition("skills", FieldType.ARRAY),
        FieldDefinition("createdAt", FieldType.DATETIME),
        FieldDefinition("updatedAt", FieldType.DATETIME),
        FieldDefinition("isActive", FieldType.BOOLEAN),
        FieldDefinition("lastRunAt", FieldType.DATETIME),
        FieldDefinition(
            "frequency", FieldType.ENUM, enum_values=["daily", "weekly", "realtime"]
        ),
    ),
    RecordCategory.APPLICATIONS: _schema(
        RecordCategory.APPLICATIONS,
        "A job application the user is tracking",
        FieldDefinition("applicationId", FieldType.STRING, required=True),
        FieldDefinition("jobId", FieldType.STRING, required=True),
        FieldDefinition("jobTitle", FieldType.STRING),
        FieldDefinition("company", FieldType.STRING),
        FieldDefinition(
            "status", FieldType.ENUM, required=True, enum_values=APPLICATION_STATUSES
        ),
        FieldDefinition("appliedAt", FieldType.DATETIME),
        FieldDefinition("notes", FieldType.STRING),
        FieldDefinition("events", FieldType.ARRAY),
    ),
    RecordCategory.JOB_BOARDS: _schema(
        RecordCategory.JOB_BOARDS,
        "A user-curated board of jobs",
        FieldDefinition("boardId", FieldType.STRING, required=True),
        FieldDefinition("name", FieldType.STRING, required=True),
        FieldDefinition("description", FieldType.STRING),
        FieldDefinition("jobIds", FieldType.ARRAY),
        FieldDefinition("tags", FieldType.ARRAY),
        FieldDefinition("isPublic", FieldType.BOOLEAN),
        FieldDefinition("createdAt", FieldType.DATETIME),
        FieldDefinition("updatedAt", FieldType.DATETIME),
    ),
    RecordCategory.SEARCH_RESULTS: _schema(
        RecordCategory.SEARCH_RESULTS,
        "Jobs extracted by one browser-automation search session",
        FieldDefinition("searchSessionId", FieldType.STRING, required=True),
        FieldDefinition("searchId", FieldType.STRING),
        FieldDefinition("jobs", FieldType.ARRAY),
        FieldDefinition("searchParams", FieldType.OBJECT),
        FieldDefinition("status", FieldType.ENUM, enum_values=SEARCH_RESULT_STATUSES),
        FieldDefinition("totalJobsFound", FieldType.INTEGER),
        FieldDefinition("createdAt", FieldType.DATETIME),
        FieldDefinition("updatedAt", FieldType.DATETIME),
    ),
    RecordCategory.MASTER_SEARCHES: _schema(
        RecordCategory.MASTER_SEARCHES,
        "A search fanned out across several job boards",
        FieldDefinition("searchId", FieldType.STRING, required=True),
        FieldDefinition("searchParams", FieldType.OBJECT),
        FieldDefinition("createdAt", FieldType.DATETIME),
    ),
    RecordCategory.PROFILE: _schema(
        RecordCategory.PROFILE,
        "The user's profile",
        FieldDefinition("firstName", FieldType.STRING),
        FieldDefinition("lastName", FieldType.STRING),
        FieldDefinition("email", FieldType.STRING),
        FieldDefinition("phone", FieldType.STRING),
        FieldDefinition("location", FieldType.STRING),
        FieldDefinition("skills", FieldType.ARRAY),
        FieldDefinition("experience", FieldType.ARRAY),
        FieldDefinition("education", FieldType.ARRAY),
        FieldDefinition(
            "subscriptionTier", FieldType.ENUM, enum_values=["free", "premium"]
        ),
        FieldDefinition("createdAt", FieldType.DATETIME),
        FieldDefinition("updatedAt", FieldType.DATETIME),
    ),
}
