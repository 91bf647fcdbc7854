"""Collects anonymous session data from the local store."""

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple
import json
import logging

from .errors import CollectionParseError
from .models.migration import MigrationBundle, MigrationPreview, dedupe_records
from .models.record import (
    RecordCategory,
    UserRecord,
    LIST_CATEGORIES,
    records_from_list,
)
from .storage.base import LocalAnonymousStore, StorageKeys

logger = logging.getLogger(__name__)


@dataclass
class CategoryRead:
    """Result of reading one category from the store."""
    category: RecordCategory
    key: str
    value: Any = None
    error: Optional[CollectionParseError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class MigrationCollector:
    """
    Reads everything an anonymous session accumulated, without side effects.

    Each category is read on its own: a category whose stored value cannot
    be parsed is treated as empty for that run and recorded in ``warnings``
    instead of aborting the whole collection.
    """

    def __init__(self, store: LocalAnonymousStore):
        """
        Initialize the collector.

        Args:
            store: Local anonymous store to read from
        """
        self.store = store
        self._warnings: List[CollectionParseError] = []

    @property
    def warnings(self) -> List[CollectionParseError]:
        """Parse failures from the most recent collection."""
        return list(self._warnings)

    def has_anonymous_data(self) -> bool:
        """
        True if any category holds usable data or an anonymous id is present.

        Categories are parsed the same way ``collect_bundle`` parses them, so
        a value that cannot be read does not count as data.
        """
        if not self.store.available:
            return False

        bundle, _ = self._collect()
        return not bundle.is_empty

    def get_anonymous_id(self) -> Optional[str]:
        """Get the anonymous session id, if one was recorded."""
        if not self.store.available:
            return None
        value = self.store.get_item(StorageKeys.ANONYMOUS_ID)
        return value.strip() if value and value.strip() else None

    def collect_bundle(self) -> MigrationBundle:
        """
        Collect all anonymous data into one bundle.

        Returns:
            MigrationBundle; empty when the store is unavailable
        """
        self._warnings = []

        if not self.store.available:
            logger.info("Local store unavailable, nothing to collect")
            return MigrationBundle()

        bundle, self._warnings = self._collect()
        for warning in self._warnings:
            logger.warning(f"Collection warning: {warning}")

        logger.debug(
            f"Collected {bundle.total_items} items "
            f"({len(self._warnings)} categories unreadable)"
        )
        return bundle

    def preview(self) -> MigrationPreview:
        """Counts and serialized size of what a migration would move."""
        return MigrationPreview.from_bundle(self.collect_bundle())

    def _collect(self) -> Tuple[MigrationBundle, List[CollectionParseError]]:
        bundle = MigrationBundle()
        warnings = []

        for category in LIST_CATEGORIES:
            read = self._read_records(category)
            if read.ok:
                bundle.set_records(category, read.value)
            else:
                warnings.append(read.error)

        read = self._read_board_preferences()
        if read.ok:
            bundle.board_preferences = read.value
        else:
            warnings.append(read.error)

        read = self._read_profile()
        if read.ok:
            bundle.profile = read.value
        else:
            warnings.append(read.error)

        bundle.anonymous_id = self.get_anonymous_id()
        return bundle, warnings

    def _read_json(self, category: RecordCategory) -> CategoryRead:
        key = StorageKeys.BY_CATEGORY[category]
        raw = self.store.get_item(key)
        if raw is None or raw == "":
            return CategoryRead(category=category, key=key)

        try:
            return CategoryRead(category=category, key=key, value=json.loads(raw))
        except (json.JSONDecodeError, TypeError) as e:
            return self._failed(category, key, str(e))

    def _read_records(self, category: RecordCategory) -> CategoryRead:
        read = self._read_json(category)
        if not read.ok:
            return read

        try:
            records = records_from_list(category, read.value)
        except ValueError as e:
            return self._failed(category, read.key, str(e))

        read.value = dedupe_records(records)
        return read

    def _read_board_preferences(self) -> CategoryRead:
        category = RecordCategory.BOARD_PREFERENCES
        read = self._read_json(category)
        if not read.ok:
            return read

        value = read.value or []
        if not isinstance(value, list) or not all(isinstance(v, (str, int)) for v in value):
            return self._failed(category, read.key, "Expected a list of board ids")

        read.value = list(dict.fromkeys(str(v) for v in value))
        return read

    def _read_profile(self) -> CategoryRead:
        category = RecordCategory.PROFILE
        read = self._read_json(category)
        if not read.ok:
            return read

        if not read.value:
            read.value = None
            return read

        try:
            read.value = UserRecord.from_dict(category, read.value)
        except ValueError as e:
            return self._failed(category, read.key, str(e))
        return read

    def _failed(self, category: RecordCategory, key: str, message: str) -> CategoryRead:
        return CategoryRead(category=category, key=key, error=CollectionParseError(key, message))

