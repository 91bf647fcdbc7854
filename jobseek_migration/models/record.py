"""Record models for anonymous user data."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from enum import Enum
import copy


class RecordCategory(str, Enum):
    """Categories of user data carried in a migration bundle."""
    SAVED_JOBS = "savedJobs"
    SAVED_SEARCHES = "savedSearches"
    APPLICATIONS = "applications"
    JOB_BOARDS = "jobBoards"
    BOARD_PREFERENCES = "boardPreferences"
    SEARCH_RESULTS = "searchResults"
    PROFILE = "profile"
    MASTER_SEARCHES = "masterSearches"  # Server-side only, reached through the sweep

    @property
    def id_field(self) -> Optional[str]:
        """Field that identifies a record within this category."""
        return _ID_FIELDS.get(self)

    @property
    def label(self) -> str:
        """Human-readable label used in error messages."""
        return _LABELS[self]


_ID_FIELDS = {
    RecordCategory.SAVED_JOBS: "jobId",
    RecordCategory.SAVED_SEARCHES: "searchId",
    RecordCategory.APPLICATIONS: "applicationId",
    RecordCategory.JOB_BOARDS: "boardId",
    RecordCategory.SEARCH_RESULTS: "searchSessionId",
    RecordCategory.MASTER_SEARCHES: "searchId",
}

_LABELS = {
    RecordCategory.SAVED_JOBS: "Job",
    RecordCategory.SAVED_SEARCHES: "Search",
    RecordCategory.APPLICATIONS: "Application",
    RecordCategory.JOB_BOARDS: "Board",
    RecordCategory.BOARD_PREFERENCES: "Board preferences",
    RecordCategory.SEARCH_RESULTS: "Search result",
    RecordCategory.PROFILE: "Profile",
    RecordCategory.MASTER_SEARCHES: "Master search",
}

# Categories that hold a list of records
LIST_CATEGORIES = [
    RecordCategory.SAVED_JOBS,
    RecordCategory.SAVED_SEARCHES,
    RecordCategory.APPLICATIONS,
    RecordCategory.JOB_BOARDS,
    RecordCategory.SEARCH_RESULTS,
]

# Fixed processing order for a migration attempt
MIGRATION_ORDER = [
    RecordCategory.SAVED_JOBS,
    RecordCategory.SAVED_SEARCHES,
    RecordCategory.APPLICATIONS,
    RecordCategory.JOB_BOARDS,
    RecordCategory.BOARD_PREFERENCES,
    RecordCategory.SEARCH_RESULTS,
    RecordCategory.PROFILE,
]

# Fields that only make sense for anonymous records and are dropped on write
ANONYMOUS_ONLY_FIELDS = ("anonymousId", "ttl")


@dataclass
class UserRecord:
    """
    A single record of user data.

    The payload is kept as the wire dictionary (camelCase keys) so that
    fields this service does not know about survive the round trip.
    """
    category: RecordCategory
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def id(self) -> Optional[str]:
        """Record identifier within its category, if the category has one."""
        id_field = self.category.id_field
        if not id_field:
            return None
        value = self.data.get(id_field)
        return str(value) if value not in (None, "") else None

    def get_field(self, path: str, default: Any = None) -> Any:
        """Get a field value by dot-notation path (e.g., 'searchParams.keywords')."""
        parts = path.split(".")
        value = self.data
        for part in parts:
            if isinstance(value, dict):
                value = value.get(part)
            elif isinstance(value, list) and part.isdigit():
                idx = int(part)
                value = value[idx] if idx < len(value) else None
            else:
                return default
            if value is None:
                return default
        return value

    def for_user(self, user_id: str) -> Dict[str, Any]:
        """Copy of the payload owned by ``user_id`` with anonymous-only fields removed."""
        item = copy.deepcopy(self.data)
        for key in ANONYMOUS_ONLY_FIELDS:
            item.pop(key, None)
        item["userId"] = user_id
        return item

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire dictionary."""
        return copy.deepcopy(self.data)

    @classmethod
    def from_dict(cls, category: RecordCategory, data: Any) -> "UserRecord":
        """Create from a wire dictionary."""
        if not isinstance(data, dict):
            raise ValueError(
                f"Expected an object for {category.value} record, got {type(data).__name__}"
            )
        return cls(category=category, data=copy.deepcopy(data))


def records_from_list(category: RecordCategory, items: Any) -> List[UserRecord]:
    """Parse a JSON array into records, raising ValueError on a malformed payload."""
    if items is None:
        return []
    if not isinstance(items, list):
        raise ValueError(f"Expected a list for {category.value}, got {type(items).__name__}")
    return [UserRecord.from_dict(category, item) for item in items]
