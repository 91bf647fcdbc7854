"""Persistence boundary that posts the bundle to the migration endpoint."""

import asyncio
import logging
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config import Settings
from ..errors import TransportError
from ..models.migration import MigrationBundle, MigrationProgress, ProgressCallback
from ..models.record import MIGRATION_ORDER
from .base import BoundaryResponse, PersistenceBoundary

logger = logging.getLogger(__name__)


def replay_progress(bundle: MigrationBundle, on_progress: Optional[ProgressCallback]) -> None:
    """Report one progress snapshot per non-empty category, in migration order."""
    if not on_progress:
        return

    total = bundle.total_items
    processed = 0
    for category in MIGRATION_ORDER:
        size = bundle.category_size(category)
        if size == 0:
            continue
        processed += size
        on_progress(MigrationProgress.create(total, processed, category.value))


class HTTPPersistenceBoundary(PersistenceBoundary):
    """
    Sends the whole bundle in one POST.

    The endpoint writes every category itself, so progress can only be
    reported once the response is back.
    """

    def __init__(
        self,
        api_url: str,
        auth_token: Optional[str] = None,
        timeout: float = 30.0,
        max_retries: int = 3,
        backoff_factor: float = 2.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the boundary.

        Args:
            api_url: Full URL of the migrate endpoint
            auth_token: Bearer token sent in the Authorization header
            timeout: Request timeout in seconds
            max_retries: Retries for 429 and 5xx responses
            backoff_factor: urllib3 backoff factor
            session: Custom requests session
        """
        self.api_url = api_url
        self.auth_token = auth_token
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self._session = session or self._create_session()

    @classmethod
    def from_settings(cls, settings: Settings, auth_token: Optional[str] = None) -> "HTTPPersistenceBoundary":
        return cls(
            api_url=settings.migration_api_url,
            auth_token=auth_token,
            timeout=settings.request_timeout,
            max_retries=settings.max_retries,
            backoff_factor=settings.backoff_factor,
        )

    def _create_session(self) -> requests.Session:
        """Create a requests session with retry logic."""
        session = requests.Session()

        # Writes are upserts, so POST is safe to retry
        retries = Retry(
            total=self.max_retries,
            backoff_factor=self.backoff_factor,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=frozenset({"POST"}) | Retry.DEFAULT_ALLOWED_METHODS,
            raise_on_status=False,
        )

        adapter = HTTPAdapter(max_retries=retries)
        session.mount("https://", adapter)
        session.mount("http://", adapter)

        session.headers["Content-Type"] = "application/json"
        return session

    async def submit(
        self,
        user_id: str,
        bundle: MigrationBundle,
        version: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> BoundaryResponse:
        payload = {
            "userId": user_id,
            "data": bundle.to_dict(),
            "version": version,
        }
        body = await asyncio.to_thread(self._post, payload)
        response = BoundaryResponse.from_dict(body)
        replay_progress(bundle, on_progress)
        return response

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        headers = {}
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"

        try:
            response = self._session.post(
                self.api_url,
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Migration request failed: {e}")
            raise TransportError(f"Migration request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise TransportError(self._error_message(response), status_code=response.status_code)

        try:
            body = response.json()
        except ValueError as e:
            raise TransportError(f"Invalid response from migration endpoint: {e}", response.status_code) from e

        if not isinstance(body, dict):
            raise TransportError("Invalid response from migration endpoint", response.status_code)

        return body

    def _error_message(self, response: requests.Response) -> str:
        message = f"HTTP {response.status_code}"
        try:
            error_data = response.json()
        except ValueError:
            return message

        if isinstance(error_data, dict):
            detail = error_data.get("message") or error_data.get("error")
            if detail:
                message = f"{message}: {detail}"
        return message
