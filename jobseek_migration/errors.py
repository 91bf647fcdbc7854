"""Exception types raised during anonymous data migration."""

from typing import Optional


class MigrationError(Exception):
    """Base class for migration errors."""


class CollectionParseError(MigrationError):
    """A single category in the local store could not be parsed."""

    def __init__(self, key: str, message: str):
        self.key = key
        self.message = message
        super().__init__(f"Failed to parse {key}: {message}")


class NotAuthenticatedError(MigrationError):
    """Migration was requested without an authenticated user id."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class RecordValidationError(MigrationError):
    """A record failed validation before being written."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class ItemWriteError(MigrationError):
    """One record within a category failed to persist."""

    def __init__(self, category: str, record_id: Optional[str], message: str):
        self.category = category
        self.record_id = record_id
        self.message = message
        super().__init__(self.describe())

    def describe(self) -> str:
        """Format as ``<Category> <id>: <message>``."""
        if self.record_id:
            return f"{self.category} {self.record_id}: {self.message}"
        return f"{self.category}: {self.message}"


class AnonymousSweepError(MigrationError):
    """Best-effort migration of server-side anonymous records failed."""


class TransportError(MigrationError):
    """The call to the persistence boundary itself failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class InvalidStatusTransition(MigrationError):
    """The status tracker was asked to make an illegal transition."""


class MigrationInProgressError(MigrationError):
    """A migration attempt is already running for this session."""
