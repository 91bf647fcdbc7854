"""Validation service for user data records."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from dateutil import parser as date_parser

from ..errors import RecordValidationError
from ..models.record import UserRecord
from ..models.schema import (
    FieldType,
    EntitySchema,
    FieldDefinition,
    RECORD_SCHEMAS,
)

logger = logging.getLogger(__name__)


@dataclass
class ValidationIssue:
    """A validation problem found on a record."""
    field: str
    message: str


class RecordValidator:
    """
    Validator for records before they are written.

    Supports:
    - Required field validation
    - Type validation
    - Enum validation
    """

    def __init__(self, schemas: Optional[Dict[Any, EntitySchema]] = None):
        self.schemas = schemas or RECORD_SCHEMAS

    def validate_record(self, record: UserRecord) -> List[ValidationIssue]:
        """
        Validate a record against its category schema.

        Args:
            record: The record to validate

        Returns:
            List of validation issues, empty when the record is valid
        """
        schema = self.schemas.get(record.category)
        if not schema:
            return []

        issues = []
        for field_name, field_def in schema.fields.items():
            issues.extend(self._validate_field(field_name, record.data.get(field_name), field_def))
        return issues

    def check(self, record: UserRecord) -> None:
        """
        Raise on the first validation issue.

        Raises:
            RecordValidationError: if the record is invalid
        """
        issues = self.validate_record(record)
        if issues:
            issue = issues[0]
            raise RecordValidationError(issue.field, issue.message)

    def _validate_field(
        self,
        field_name: str,
        value: Any,
        field_def: FieldDefinition
    ) -> List[ValidationIssue]:
        """Validate a single field."""
        if value is None or value == "":
            if field_def.required:
                return [ValidationIssue(
                    field=field_name,
                    message="Required field is missing",
                )]
            return []

        type_issue = self._validate_type(field_name, value, field_def.type)
        if type_issue:
            return [type_issue]

        if field_def.enum_values and value not in field_def.enum_values:
            return [ValidationIssue(
                field=field_name,
                message=f"Invalid value. Must be one of: {', '.join(field_def.enum_values)}",
            )]

        return []

    def _validate_type(
        self,
        field_name: str,
        value: Any,
        expected_type: FieldType
    ) -> Optional[ValidationIssue]:
        """Validate the type of a value."""
        type_checks = {
            FieldType.STRING: lambda v: isinstance(v, (str, int)) and not isinstance(v, bool),
            FieldType.INTEGER: lambda v: isinstance(v, int) and not isinstance(v, bool),
            FieldType.DECIMAL: lambda v: isinstance(v, (int, float)) and not isinstance(v, bool),
            FieldType.BOOLEAN: lambda v: isinstance(v, bool),
            FieldType.DATETIME: lambda v: isinstance(v, str) and self._is_valid_datetime(v),
            FieldType.ENUM: lambda v: isinstance(v, str),
            FieldType.OBJECT: lambda v: isinstance(v, dict),
            FieldType.ARRAY: lambda v: isinstance(v, list),
        }

        check_func = type_checks.get(expected_type)
        if check_func and not check_func(value):
            return ValidationIssue(
                field=field_name,
                message=f"Invalid type. Expected {expected_type.value}, got {type(value).__name__}",
            )

        return None

    def _is_valid_datetime(self, value: str) -> bool:
        """Check if string parses as a date/time."""
        try:
            date_parser.parse(value)
            return True
        except (ValueError, OverflowError):
            return False
