"""Data models for the migration application."""

from .record import (
    RecordCategory,
    UserRecord,
    LIST_CATEGORIES,
    MIGRATION_ORDER,
    ANONYMOUS_ONLY_FIELDS,
)
from .migration import (
    MigrationStatus,
    MigrationBundle,
    MigratedCounts,
    MigrationProgress,
    MigrationResult,
    MigrationPreview,
)
from .schema import (
    FieldType,
    FieldDefinition,
    EntitySchema,
    RECORD_SCHEMAS,
)

__all__ = [
    "RecordCategory",
    "UserRecord",
    "LIST_CATEGORIES",
    "MIGRATION_ORDER",
    "ANONYMOUS_ONLY_FIELDS",
    "MigrationStatus",
    "MigrationBundle",
    "MigratedCounts",
    "MigrationProgress",
    "MigrationResult",
    "MigrationPreview",
    "FieldType",
    "FieldDefinition",
    "EntitySchema",
    "RECORD_SCHEMAS",
]
