"""Repository interface for the authoritative user data store."""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
import copy
import logging
import threading

from ..models.record import RecordCategory, UserRecord

logger = logging.getLogger(__name__)

# Sort-key prefixes for the single-table design
DATA_TYPES = {
    RecordCategory.PROFILE: "PROFILE#MAIN",
    RecordCategory.SAVED_JOBS: "JOB#",
    RecordCategory.SAVED_SEARCHES: "SEARCH#",
    RecordCategory.APPLICATIONS: "APPLICATION#",
    RecordCategory.JOB_BOARDS: "BOARD#",
    RecordCategory.BOARD_PREFERENCES: "PREFERENCES#MAIN",
    RecordCategory.SEARCH_RESULTS: "JOB_SEARCH_RESULT#",
    RecordCategory.MASTER_SEARCHES: "MASTER_SEARCH#",
}

# Timestamp field stamped on first write, per category
CREATED_FIELDS = {
    RecordCategory.SAVED_JOBS: "savedAt",
    RecordCategory.APPLICATIONS: "appliedAt",
}


def now_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


def data_type_key(category: RecordCategory, record_id: Optional[str] = None) -> str:
    """Sort key for a category and record id."""
    prefix = DATA_TYPES[category]
    if not prefix.endswith("#"):
        return prefix
    return f"{prefix}{record_id or ''}"


def data_type_for(record: UserRecord) -> str:
    """Sort key for a record: the category prefix plus the record id."""
    if record.category.id_field and not record.id:
        raise ValueError(f"{record.category.label} record has no {record.category.id_field}")
    return data_type_key(record.category, record.id)


def category_for(data_type: str) -> Optional[RecordCategory]:
    """Reverse lookup of a sort key's category."""
    for category, prefix in DATA_TYPES.items():
        if data_type == prefix or (prefix.endswith("#") and data_type.startswith(prefix)):
            return category
    return None


def build_item(user_id: str, record: UserRecord) -> Dict[str, Any]:
    """Item to upsert for ``record`` under ``user_id``."""
    item = record.for_user(user_id)
    now = now_iso()
    created_field = CREATED_FIELDS.get(record.category, "createdAt")
    item[created_field] = item.get(created_field) or now
    if record.category != RecordCategory.SAVED_JOBS:
        item["updatedAt"] = now
    item["dataType"] = data_type_for(record)
    return item


class UserDataRepository(ABC):
    """
    Authoritative multi-tenant store keyed by user id.

    Writes are upserts by record id: writing the same record twice leaves
    one copy behind.
    """

    @abstractmethod
    def put_record(self, user_id: str, record: UserRecord) -> Dict[str, Any]:
        """
        Upsert a record under a user.

        Args:
            user_id: Authenticated user id that will own the record
            record: Record to write; anonymous-only fields are dropped

        Returns:
            The item as written
        """
        pass

    @abstractmethod
    def get_record(self, user_id: str, category: RecordCategory, record_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Get one record, or None."""
        pass

    @abstractmethod
    def list_records(self, user_id: str, category: RecordCategory) -> List[Dict[str, Any]]:
        """All records of a category owned by a user."""
        pass

    @abstractmethod
    def save_board_preferences(self, user_id: str, board_ids: List[str]) -> List[str]:
        """
        Merge board ids into the user's saved-board preferences.

        Returns:
            The resulting list of saved board ids
        """
        pass

    @abstractmethod
    def get_search_results_by_anonymous_id(self, anonymous_id: str) -> List[UserRecord]:
        """Search results written under an anonymous session."""
        pass

    @abstractmethod
    def get_master_searches_by_anonymous_id(self, anonymous_id: str) -> List[UserRecord]:
        """Master searches written under an anonymous session."""
        pass

    def save_job(self, user_id: str, job: Dict[str, Any]) -> Dict[str, Any]:
        return self.put_record(user_id, UserRecord(RecordCategory.SAVED_JOBS, job))

    def save_search(self, user_id: str, search: Dict[str, Any]) -> Dict[str, Any]:
        return self.put_record(user_id, UserRecord(RecordCategory.SAVED_SEARCHES, search))

    def save_application(self, user_id: str, application: Dict[str, Any]) -> Dict[str, Any]:
        return self.put_record(user_id, UserRecord(RecordCategory.APPLICATIONS, application))

    def save_job_board(self, user_id: str, board: Dict[str, Any]) -> Dict[str, Any]:
        return self.put_record(user_id, UserRecord(RecordCategory.JOB_BOARDS, board))

    def save_search_result(self, user_id: str, result: Dict[str, Any]) -> Dict[str, Any]:
        return self.put_record(user_id, UserRecord(RecordCategory.SEARCH_RESULTS, result))

    def save_master_search(self, user_id: str, search: Dict[str, Any]) -> Dict[str, Any]:
        return self.put_record(user_id, UserRecord(RecordCategory.MASTER_SEARCHES, search))

    def save_profile(self, user_id: str, profile: Dict[str, Any]) -> Dict[str, Any]:
        return self.put_record(user_id, UserRecord(RecordCategory.PROFILE, profile))

    def get_user_saved_boards(self, user_id: str) -> List[str]:
        prefs = self.get_record(user_id, RecordCategory.BOARD_PREFERENCES)
        return list(prefs.get("savedBoardIds", [])) if prefs else []

    def get_all_user_data(self, user_id: str) -> Dict[str, Any]:
        """Every record a user owns, grouped by category wire name."""
        profile = self.get_record(user_id, RecordCategory.PROFILE)
        return {
            "profile": profile,
            "savedJobs": self.list_records(user_id, RecordCategory.SAVED_JOBS),
            "savedSearches": self.list_records(user_id, RecordCategory.SAVED_SEARCHES),
            "applications": self.list_records(user_id, RecordCategory.APPLICATIONS),
            "jobBoards": self.list_records(user_id, RecordCategory.JOB_BOARDS),
            "searchResults": self.list_records(user_id, RecordCategory.SEARCH_RESULTS),
            "boardPreferences": self.get_user_saved_boards(user_id),
        }


class InMemoryRepository(UserDataRepository):
    """Repository kept in process memory, for local runs and tests."""

    def __init__(self):
        self._items: Dict[Tuple[str, str], Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def put_record(self, user_id: str, record: UserRecord) -> Dict[str, Any]:
        item = build_item(user_id, record)
        with self._lock:
            self._items[(user_id, item["dataType"])] = item
        return copy.deepcopy(item)

    def put_anonymous_record(self, anonymous_id: str, record: UserRecord, ttl: Optional[int] = None) -> Dict[str, Any]:
        """Write a record the way an anonymous search session does."""
        item = build_item(anonymous_id, record)
        item["anonymousId"] = anonymous_id
        if ttl is not None:
            item["ttl"] = ttl
        with self._lock:
            self._items[(anonymous_id, item["dataType"])] = item
        return copy.deepcopy(item)

    def get_record(self, user_id: str, category: RecordCategory, record_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
        data_type = data_type_key(category, record_id)
        with self._lock:
            item = self._items.get((user_id, data_type))
        return copy.deepcopy(item) if item else None

    def list_records(self, user_id: str, category: RecordCategory) -> List[Dict[str, Any]]:
        prefix = DATA_TYPES[category]
        with self._lock:
            return [
                copy.deepcopy(item)
                for (owner, data_type), item in self._items.items()
                if owner == user_id and data_type.startswith(prefix)
            ]

    def save_board_preferences(self, user_id: str, board_ids: List[str]) -> List[str]:
        key = (user_id, DATA_TYPES[RecordCategory.BOARD_PREFERENCES])
        now = now_iso()
        with self._lock:
            prefs = self._items.get(key)
            if prefs is None:
                prefs = {
                    "userId": user_id,
                    "dataType": key[1],
                    "savedBoardIds": [],
                    "initialized": True,
                    "createdAt": now,
                }
                self._items[key] = prefs
            merged = list(dict.fromkeys(list(prefs.get("savedBoardIds", [])) + list(board_ids)))
            prefs["savedBoardIds"] = merged
            prefs["updatedAt"] = now
        return list(merged)

    def _by_anonymous_id(self, anonymous_id: str, category: RecordCategory) -> List[UserRecord]:
        prefix = DATA_TYPES[category]
        with self._lock:
            items = [
                copy.deepcopy(item)
                for (_, data_type), item in self._items.items()
                if item.get("anonymousId") == anonymous_id and data_type.startswith(prefix)
            ]
        return [UserRecord(category=category, data=item) for item in items]

    def get_search_results_by_anonymous_id(self, anonymous_id: str) -> List[UserRecord]:
        return self._by_anonymous_id(anonymous_id, RecordCategory.SEARCH_RESULTS)

    def get_master_searches_by_anonymous_id(self, anonymous_id: str) -> List[UserRecord]:
        return self._by_anonymous_id(anonymous_id, RecordCategory.MASTER_SEARCHES)

    def __len__(self) -> int:
        return len(self._items)
