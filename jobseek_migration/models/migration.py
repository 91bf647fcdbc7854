"""Migration execution models."""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
from enum import Enum
from datetime import datetime, timezone
import json
import logging

from .record import (
    RecordCategory,
    UserRecord,
    LIST_CATEGORIES,
    records_from_list,
)

logger = logging.getLogger(__name__)


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with a trailing Z."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


class MigrationStatus(str, Enum):
    """Status of the migration for one browser session."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class MigrationBundle:
    """Everything an anonymous session accumulated, transferred in one attempt."""
    saved_jobs: List[UserRecord] = field(default_factory=list)
    saved_searches: List[UserRecord] = field(default_factory=list)
    applications: List[UserRecord] = field(default_factory=list)
    job_boards: List[UserRecord] = field(default_factory=list)
    search_results: List[UserRecord] = field(default_factory=list)
    board_preferences: List[str] = field(default_factory=list)
    profile: Optional[UserRecord] = None
    anonymous_id: Optional[str] = None

    _ATTRS = {
        RecordCategory.SAVED_JOBS: "saved_jobs",
        RecordCategory.SAVED_SEARCHES: "saved_searches",
        RecordCategory.APPLICATIONS: "applications",
        RecordCategory.JOB_BOARDS: "job_boards",
        RecordCategory.SEARCH_RESULTS: "search_results",
    }

    def records(self, category: RecordCategory) -> List[UserRecord]:
        """Get the records of a list category."""
        attr = self._ATTRS.get(category)
        if not attr:
            raise ValueError(f"Not a record list category: {category.value}")
        return getattr(self, attr)

    def set_records(self, category: RecordCategory, records: List[UserRecord]) -> None:
        """Replace the records of a list category."""
        attr = self._ATTRS.get(category)
        if not attr:
            raise ValueError(f"Not a record list category: {category.value}")
        setattr(self, attr, records)

    def category_size(self, category: RecordCategory) -> int:
        """Number of work items a category contributes to a migration."""
        if category == RecordCategory.BOARD_PREFERENCES:
            return len(self.board_preferences)
        if category == RecordCategory.PROFILE:
            return 1 if self.profile else 0
        if category == RecordCategory.MASTER_SEARCHES:
            return 0
        return len(self.records(category))

    @property
    def total_items(self) -> int:
        """Denominator for progress reporting."""
        total = sum(len(self.records(c)) for c in LIST_CATEGORIES)
        total += len(self.board_preferences)
        if self.profile:
            total += 1
        return total

    @property
    def is_empty(self) -> bool:
        """True when there is nothing to migrate, not even an anonymous id."""
        return self.total_items == 0 and not self.anonymous_id

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase wire representation."""
        return {
            "savedJobs": [r.to_dict() for r in self.saved_jobs],
            "savedSearches": [r.to_dict() for r in self.saved_searches],
            "applications": [r.to_dict() for r in self.applications],
            "jobBoards": [r.to_dict() for r in self.job_boards],
            "searchResults": [r.to_dict() for r in self.search_results],
            "boardPreferences": list(self.board_preferences),
            "profile": self.profile.to_dict() if self.profile else None,
            "anonymousId": self.anonymous_id,
        }

    def to_json(self) -> str:
        """Compact JSON serialisation, as sent over the wire."""
        return json.dumps(self.to_dict(), separators=(",", ":"), default=str)

    @property
    def size_bytes(self) -> int:
        """Serialized UTF-8 size of the bundle."""
        return len(self.to_json().encode("utf-8"))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MigrationBundle":
        """
        Create from the wire representation.

        Raises ValueError when a category has the wrong shape. Records that
        repeat an id already seen in their category are dropped.
        """
        if not isinstance(data, dict):
            raise ValueError("Migration data must be an object")

        bundle = cls()
        for category in LIST_CATEGORIES:
            records = records_from_list(category, data.get(category.value))
            bundle.set_records(category, dedupe_records(records))

        prefs = data.get("boardPreferences") or []
        if not isinstance(prefs, list):
            raise ValueError("boardPreferences must be a list of board ids")
        bundle.board_preferences = list(dict.fromkeys(str(p) for p in prefs))

        profile = data.get("profile")
        if profile:
            bundle.profile = UserRecord.from_dict(RecordCategory.PROFILE, profile)

        anonymous_id = data.get("anonymousId")
        bundle.anonymous_id = str(anonymous_id) if anonymous_id else None
        return bundle


def dedupe_records(records: List[UserRecord]) -> List[UserRecord]:
    """Keep the first record for each id; records without an id are kept."""
    seen = set()
    result = []
    for record in records:
        record_id = record.id
        if record_id is None:
            result.append(record)
            continue
        if record_id in seen:
            logger.warning(f"Dropping duplicate {record.category.value} record {record_id}")
            continue
        seen.add(record_id)
        result.append(record)
    return result


@dataclass
class MigratedCounts:
    """Per-category number of migrated records."""
    saved_jobs: int = 0
    saved_searches: int = 0
    applications: int = 0
    job_boards: int = 0
    search_results: int = 0
    profile: bool = False

    _ATTRS = {
        RecordCategory.SAVED_JOBS: "saved_jobs",
        RecordCategory.SAVED_SEARCHES: "saved_searches",
        RecordCategory.APPLICATIONS: "applications",
        RecordCategory.JOB_BOARDS: "job_boards",
        RecordCategory.SEARCH_RESULTS: "search_results",
    }

    def add(self, category: RecordCategory, count: int) -> None:
        """Add to a category counter. Categories without a counter are ignored."""
        if category == RecordCategory.PROFILE:
            self.profile = self.profile or count > 0
            return
        attr = self._ATTRS.get(category)
        if attr:
            setattr(self, attr, getattr(self, attr) + count)

    def get(self, category: RecordCategory) -> int:
        """Get a category counter."""
        if category == RecordCategory.PROFILE:
            return 1 if self.profile else 0
        attr = self._ATTRS.get(category)
        return getattr(self, attr) if attr else 0

    @property
    def total(self) -> int:
        """Total migrated records, counting the profile as one."""
        return sum(getattr(self, a) for a in self._ATTRS.values()) + (1 if self.profile else 0)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase wire representation."""
        return {
            "savedJobs": self.saved_jobs,
            "savedSearches": self.saved_searches,
            "applications": self.applications,
            "jobBoards": self.job_boards,
            "searchResults": self.search_results,
            "profile": self.profile,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "MigratedCounts":
        """Create from the wire representation, tolerating missing keys."""
        data = data or {}
        return cls(
            saved_jobs=max(0, int(data.get("savedJobs", 0) or 0)),
            saved_searches=max(0, int(data.get("savedSearches", 0) or 0)),
            applications=max(0, int(data.get("applications", 0) or 0)),
            job_boards=max(0, int(data.get("jobBoards", 0) or 0)),
            search_results=max(0, int(data.get("searchResults", 0) or 0)),
            profile=bool(data.get("profile", False)),
        )


ProgressCallback = Callable[["MigrationProgress"], None]


@dataclass
class MigrationProgress:
    """Progress snapshot reported after each category."""
    total_items: int
    processed_items: int
    current_type: str
    percentage: int

    @classmethod
    def create(cls, total_items: int, processed_items: int, current_type: str) -> "MigrationProgress":
        """Build a snapshot, computing the rounded percentage."""
        if total_items > 0:
            percentage = round(processed_items / total_items * 100)
        else:
            percentage = 100
        return cls(
            total_items=total_items,
            processed_items=processed_items,
            current_type=current_type,
            percentage=percentage,
        )


@dataclass
class MigrationResult:
    """Outcome of one migration attempt."""
    migrated: MigratedCounts = field(default_factory=MigratedCounts)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    success: bool = False
    timestamp: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "success": self.success,
            "migrated": self.migrated.to_dict(),
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MigrationResult":
        """Create from dictionary representation."""
        return cls(
            migrated=MigratedCounts.from_dict(data.get("migrated") or data.get("migratedCounts")),
            errors=list(data.get("errors") or []),
            warnings=list(data.get("warnings") or []),
            success=bool(data.get("success", False)),
            timestamp=data.get("timestamp") or utc_now_iso(),
        )


@dataclass
class MigrationPreview:
    """Lightweight summary of what a migration would move."""
    saved_jobs: int = 0
    saved_searches: int = 0
    applications: int = 0
    job_boards: int = 0
    search_results: int = 0
    board_preferences: int = 0
    has_profile: bool = False
    total_size_bytes: int = 0

    @classmethod
    def from_bundle(cls, bundle: MigrationBundle) -> "MigrationPreview":
        return cls(
            saved_jobs=len(bundle.saved_jobs),
            saved_searches=len(bundle.saved_searches),
            applications=len(bundle.applications),
            job_boards=len(bundle.job_boards),
            search_results=len(bundle.search_results),
            board_preferences=len(bundle.board_preferences),
            has_profile=bundle.profile is not None,
            total_size_bytes=bundle.size_bytes,
        )

    @property
    def counts(self) -> Dict[str, int]:
        """Per-category counts keyed by wire name."""
        return {
            "savedJobs": self.saved_jobs,
            "savedSearches": self.saved_searches,
            "applications": self.applications,
            "jobBoards": self.job_boards,
            "searchResults": self.search_results,
            "boardPreferences": self.board_preferences,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "counts": {**self.counts, "hasProfile": self.has_profile},
            "totalSize": self.total_size_bytes,
        }
