"""Persistence boundary that writes through a reconciler in this process."""

import logging
from typing import Optional

from ..models.migration import MigrationBundle, ProgressCallback
from ..services.reconciler import MigrationReconciler
from .base import BoundaryResponse, PersistenceBoundary

logger = logging.getLogger(__name__)


class InProcessBoundary(PersistenceBoundary):
    """Calls the reconciler directly, so progress is reported live."""

    def __init__(self, reconciler: MigrationReconciler):
        self.reconciler = reconciler

    async def submit(
        self,
        user_id: str,
        bundle: MigrationBundle,
        version: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> BoundaryResponse:
        logger.debug(f"Submitting bundle version {version} in process")
        result = await self.reconciler.reconcile(user_id, bundle, on_progress)
        return BoundaryResponse.from_result(result)
