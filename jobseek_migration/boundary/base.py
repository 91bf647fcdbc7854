"""Persistence boundary interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..models.migration import (
    MigratedCounts,
    MigrationBundle,
    MigrationResult,
    ProgressCallback,
)

SUCCESS_MESSAGE = "Migration completed successfully"
PARTIAL_MESSAGE = "Migration completed with some errors"


def completion_message(success: bool) -> str:
    return SUCCESS_MESSAGE if success else PARTIAL_MESSAGE


@dataclass
class BoundaryResponse:
    """What the authoritative store reported for one submitted bundle."""
    success: bool
    migrated: MigratedCounts = field(default_factory=MigratedCounts)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    message: str = ""

    @classmethod
    def from_result(cls, result: MigrationResult) -> "BoundaryResponse":
        return cls(
            success=result.success,
            migrated=result.migrated,
            errors=list(result.errors),
            warnings=list(result.warnings),
            message=completion_message(result.success),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BoundaryResponse":
        """Create from the endpoint's JSON body."""
        errors = [str(e) for e in data.get("errors") or []]
        return cls(
            success=bool(data.get("success", not errors)),
            migrated=MigratedCounts.from_dict(data.get("migrated")),
            errors=errors,
            warnings=[str(w) for w in data.get("warnings") or []],
            message=str(data.get("message") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "migrated": self.migrated.to_dict(),
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "message": self.message,
        }


class PersistenceBoundary(ABC):
    """
    Where a collected bundle is sent to be written under a user.

    Implementations report partial failures in the response. Only a failure
    of the call itself is raised, as ``TransportError``.
    """

    @abstractmethod
    async def submit(
        self,
        user_id: str,
        bundle: MigrationBundle,
        version: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> BoundaryResponse:
        """
        Submit a bundle for an authenticated user.

        Args:
            user_id: Authenticated user id
            bundle: Collected anonymous data
            version: Bundle format version
            on_progress: Progress callback, invoked per non-empty category

        Returns:
            BoundaryResponse with per-category counts and error strings

        Raises:
            TransportError: if the call to the store failed
        """
        pass
