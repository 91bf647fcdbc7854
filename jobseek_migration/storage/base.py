"""Base interface for the local anonymous store."""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional
import logging

from ..models.record import RecordCategory

logger = logging.getLogger(__name__)


class StorageKeys:
    """Keys the browser session stores anonymous data under."""
    # Data keys
    SAVED_JOBS = "jobseek_saved_jobs"
    SAVED_SEARCHES = "jobseek_saved_searches"
    APPLICATIONS = "jobseek_applications"
    JOB_BOARDS = "jobseek_job_boards"
    SEARCH_RESULTS = "jobseek_job_search_results"
    USER_PROFILE = "jobseek_profile"
    USER_SAVED_BOARDS = "jobseek_user_saved_boards"

    # System keys
    ANONYMOUS_ID = "jobseek_anonymous_id"
    MIGRATION_STATUS = "jobseek_migration_status"
    MIGRATION_RESULT = "jobseek_migration_result"
    MIGRATION_VERSION = "jobseek_migration_version"

    BY_CATEGORY: Dict[RecordCategory, str] = {
        RecordCategory.SAVED_JOBS: SAVED_JOBS,
        RecordCategory.SAVED_SEARCHES: SAVED_SEARCHES,
        RecordCategory.APPLICATIONS: APPLICATIONS,
        RecordCategory.JOB_BOARDS: JOB_BOARDS,
        RecordCategory.SEARCH_RESULTS: SEARCH_RESULTS,
        RecordCategory.BOARD_PREFERENCES: USER_SAVED_BOARDS,
        RecordCategory.PROFILE: USER_PROFILE,
    }

    @classmethod
    def data_keys(cls) -> List[str]:
        """Keys cleared after a successful migration."""
        return list(cls.BY_CATEGORY.values()) + [cls.ANONYMOUS_ID]


class LocalAnonymousStore(ABC):
    """
    Key-value storage scoped to one anonymous browser session.

    Values are raw strings (usually JSON), mirroring browser local storage,
    so a corrupted value is representable and must be handled by readers.
    """

    @property
    def available(self) -> bool:
        """Whether the backing storage can be used at all."""
        return True

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored string for ``key`` or None."""
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``."""
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove ``key`` if present."""
        pass

    @abstractmethod
    def keys(self) -> List[str]:
        """All keys currently stored."""
        pass

    def remove_items(self, keys: List[str]) -> None:
        """Remove several keys."""
        for key in keys:
            self.remove_item(key)
