"""Service layer for the migration application."""

from .repository import UserDataRepository, InMemoryRepository
from .dynamodb import DynamoDBRepository
from .validator import RecordValidator
from .reconciler import MigrationReconciler

__all__ = [
    "UserDataRepository",
    "InMemoryRepository",
    "DynamoDBRepository",
    "RecordValidator",
    "MigrationReconciler",
]
