"""Single-table DynamoDB repository for user data."""

import json
import logging
import random
import threading
import time
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, TypeVar

import boto3
from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import ClientError

from ..config import Settings
from ..models.record import RecordCategory, UserRecord
from .repository import (
    DATA_TYPES,
    UserDataRepository,
    build_item,
    data_type_key,
    now_iso,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_ERRORS = {
    "ProvisionedThroughputExceededException",
    "ThrottlingException",
    "RequestLimitExceeded",
    "ServiceUnavailable",
    "InternalServerError",
}


def error_code(error: Exception) -> Optional[str]:
    """AWS error code of a botocore ClientError, if any."""
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code")
    return None


def with_retry(
    operation: Callable[[], T],
    max_retries: int = 3,
    base_delay: float = 0.1,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Run ``operation``, retrying throttling and transient service errors.

    Backoff is exponential with up to 100ms of jitter. Validation errors and
    any other non-retryable error are raised immediately.
    """
    attempt = 0
    while True:
        try:
            return operation()
        except ClientError as e:
            code = error_code(e)
            if code == "ValidationException" or code not in RETRYABLE_ERRORS or attempt >= max_retries:
                raise

            delay = base_delay * (2 ** attempt) + random.random() * 0.1
            logger.warning(f"DynamoDB {code}, retrying in {delay:.2f}s (attempt {attempt + 1}/{max_retries})")
            sleep(delay)
            attempt += 1


def build_update_expression(updates: Dict[str, Any], exclude_keys: Optional[List[str]] = None) -> Dict[str, Any]:
    """
    Build the update parameters for an UpdateItem call.

    Keys with a None value are removed from the item; every attribute name
    goes through a placeholder so reserved words are safe.
    """
    exclude_keys = exclude_keys or []
    set_parts = []
    remove_parts = []
    names: Dict[str, str] = {}
    values: Dict[str, Any] = {}

    for idx, (key, value) in enumerate(updates.items()):
        if key in exclude_keys:
            continue

        name = f"#attr{idx}"
        names[name] = key
        if value is None:
            remove_parts.append(name)
        else:
            placeholder = f":val{idx}"
            set_parts.append(f"{name} = {placeholder}")
            values[placeholder] = value

    expression = ""
    if set_parts:
        expression = "SET " + ", ".join(set_parts)
    if remove_parts:
        expression += (" " if expression else "") + "REMOVE " + ", ".join(remove_parts)

    params: Dict[str, Any] = {
        "UpdateExpression": expression,
        "ExpressionAttributeNames": names,
    }
    if values:
        params["ExpressionAttributeValues"] = values
    return params


def to_dynamo(item: Dict[str, Any]) -> Dict[str, Any]:
    """Convert floats to Decimal, which the DynamoDB resource layer requires."""
    return json.loads(json.dumps(item, default=str), parse_float=Decimal)


def from_dynamo(value: Any) -> Any:
    """Convert Decimals back into ints and floats."""
    if isinstance(value, list):
        return [from_dynamo(v) for v in value]
    if isinstance(value, dict):
        return {k: from_dynamo(v) for k, v in value.items()}
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value


class DynamoDBRepository(UserDataRepository):
    """
    Repository over the single users table.

    Items are keyed by ``userId`` (hash) and ``dataType`` (range), where
    ``dataType`` is a category prefix plus the record id. Anonymous records
    are found through a global secondary index on ``anonymousId``.
    """

    def __init__(
        self,
        table_name: str,
        region: str = "us-east-1",
        endpoint_url: Optional[str] = None,
        anonymous_index: str = "anonymousId-index",
        max_retries: int = 3,
        retry_base_delay: float = 0.1,
    ):
        """
        Initialize the repository.

        Args:
            table_name: Name of the users table
            region: AWS region
            endpoint_url: Override endpoint (local DynamoDB)
            anonymous_index: GSI name keyed on anonymousId
            max_retries: Retries for throttling errors
            retry_base_delay: Base delay for exponential backoff, seconds
        """
        self.table_name = table_name
        self.region = region
        self.endpoint_url = endpoint_url
        self.anonymous_index = anonymous_index
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self._local = threading.local()

    @property
    def table(self):
        """
        The users table for the calling thread.

        boto3 resources are not thread-safe, so each thread gets its own
        session and resource.
        """
        table = getattr(self._local, "table", None)
        if table is None:
            session = boto3.session.Session()
            resource = session.resource("dynamodb", region_name=self.region, endpoint_url=self.endpoint_url)
            table = self._local.table = resource.Table(self.table_name)
        return table

    @classmethod
    def from_settings(cls, settings: Settings) -> "DynamoDBRepository":
        return cls(
            table_name=settings.users_table,
            region=settings.aws_region,
            endpoint_url=settings.dynamodb_endpoint_url,
            anonymous_index=settings.anonymous_index,
            max_retries=settings.max_retries,
            retry_base_delay=settings.retry_base_delay,
        )

    def _retry(self, operation: Callable[[], T]) -> T:
        return with_retry(operation, self.max_retries, self.retry_base_delay)

    def put_record(self, user_id: str, record: UserRecord) -> Dict[str, Any]:
        item = build_item(user_id, record)
        self._retry(lambda: self.table.put_item(Item=to_dynamo(item)))
        logger.debug(f"Put {item['dataType']} for user {user_id}")
        return item

    def get_record(self, user_id: str, category: RecordCategory, record_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
        key = {"userId": user_id, "dataType": data_type_key(category, record_id)}
        response = self._retry(lambda: self.table.get_item(Key=key))
        item = response.get("Item")
        return from_dynamo(item) if item else None

    def list_records(self, user_id: str, category: RecordCategory) -> List[Dict[str, Any]]:
        condition = Key("userId").eq(user_id) & Key("dataType").begins_with(DATA_TYPES[category])
        return self._query(KeyConditionExpression=condition)

    def atomic_update(
        self,
        key: Dict[str, Any],
        updates: Dict[str, Any],
        condition_expression: Optional[Any] = None,
        return_values: str = "ALL_NEW",
    ) -> Dict[str, Any]:
        """
        Update an item in place, avoiding a fetch-merge-save race.

        ``updatedAt`` is always refreshed.
        """
        params = build_update_expression({**updates, "updatedAt": now_iso()}, list(key.keys()))
        if "ExpressionAttributeValues" in params:
            params["ExpressionAttributeValues"] = to_dynamo(params["ExpressionAttributeValues"])
        if condition_expression is not None:
            params["ConditionExpression"] = condition_expression

        response = self._retry(lambda: self.table.update_item(
            Key=key,
            ReturnValues=return_values,
            **params,
        ))
        return from_dynamo(response.get("Attributes", {}))

    def save_board_preferences(self, user_id: str, board_ids: List[str]) -> List[str]:
        key = {"userId": user_id, "dataType": DATA_TYPES[RecordCategory.BOARD_PREFERENCES]}
        current = self.get_record(user_id, RecordCategory.BOARD_PREFERENCES)
        existing = list(current.get("savedBoardIds", [])) if current else []
        merged = list(dict.fromkeys(existing + list(board_ids)))

        if current:
            # Only apply if nobody changed the list since we read it
            attrs = self.atomic_update(
                key,
                {"savedBoardIds": merged},
                condition_expression=Attr("updatedAt").eq(current.get("updatedAt")),
            )
            return list(attrs.get("savedBoardIds", merged))

        now = now_iso()
        item = {
            **key,
            "savedBoardIds": merged,
            "initialized": True,
            "createdAt": now,
            "updatedAt": now,
        }
        self._retry(lambda: self.table.put_item(Item=to_dynamo(item)))
        return merged

    def get_search_results_by_anonymous_id(self, anonymous_id: str) -> List[UserRecord]:
        return self._by_anonymous_id(anonymous_id, RecordCategory.SEARCH_RESULTS)

    def get_master_searches_by_anonymous_id(self, anonymous_id: str) -> List[UserRecord]:
        return self._by_anonymous_id(anonymous_id, RecordCategory.MASTER_SEARCHES)

    def _by_anonymous_id(self, anonymous_id: str, category: RecordCategory) -> List[UserRecord]:
        items = self._query(
            IndexName=self.anonymous_index,
            KeyConditionExpression=Key("anonymousId").eq(anonymous_id),
            FilterExpression=Attr("dataType").begins_with(DATA_TYPES[category]),
        )
        return [UserRecord(category=category, data=item) for item in items]

    def _query(self, **kwargs) -> List[Dict[str, Any]]:
        """Run a query, following pagination to the end."""
        items: List[Dict[str, Any]] = []
        while True:
            response = self._retry(lambda: self.table.query(**kwargs))
            items.extend(from_dynamo(i) for i in response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break
            kwargs["ExclusiveStartKey"] = last_key
        return items
