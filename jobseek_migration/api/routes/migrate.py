"""Anonymous data migration endpoint."""

import logging
from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ...boundary.base import completion_message
from ...config import Settings
from ...errors import NotAuthenticatedError
from ...models.migration import MigrationBundle
from ...services.dynamodb import DynamoDBRepository
from ...services.reconciler import MigrationReconciler
from ...services.repository import UserDataRepository
from ..models import (
    ErrorResponse,
    MigrateRequest,
    MigrateResponse,
    MigratedCountsModel,
)
from .auth import UserMismatchError, get_header_user, require_user

logger = logging.getLogger(__name__)

router = APIRouter()


@lru_cache()
def get_repository() -> UserDataRepository:
    """Repository over the configured users table."""
    return DynamoDBRepository.from_settings(Settings.from_env())


def get_reconciler(repository: UserDataRepository = Depends(get_repository)) -> MigrationReconciler:
    return MigrationReconciler(repository)


def error_response(status_code: int, error: str, message: str) -> JSONResponse:
    body = ErrorResponse(error=error, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump())


@router.post(
    "/migrate",
    response_model=MigrateResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse},
               403: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def migrate(
    request: MigrateRequest,
    header_user: Optional[str] = Depends(get_header_user),
    reconciler: MigrationReconciler = Depends(get_reconciler),
):
    """Write an anonymous session's data under the authenticated user."""
    try:
        user_id = require_user(header_user, request.userId)
    except NotAuthenticatedError as e:
        return error_response(401, "Not authenticated", str(e))
    except UserMismatchError as e:
        return error_response(403, "Forbidden", str(e))

    if request.data is None:
        return error_response(400, "Invalid migration request", "Migration data is required")

    try:
        bundle = MigrationBundle.from_dict(request.data)
    except ValueError as e:
        return error_response(400, "Invalid migration request", str(e))

    logger.info(f"Migration request from {user_id} (version {request.version})")

    try:
        result = await reconciler.reconcile(user_id, bundle)
    except Exception as e:
        logger.exception(f"Migration failed for {user_id}: {e}")
        return error_response(500, "Migration failed", str(e))

    return MigrateResponse(
        success=result.success,
        migrated=MigratedCountsModel.from_counts(result.migrated),
        errors=result.errors,
        warnings=result.warnings,
        message=completion_message(result.success),
    )
