"""Resolution of the authenticated user for API requests."""

from typing import Optional

from fastapi import Header

from ...errors import MigrationError, NotAuthenticatedError


class UserMismatchError(MigrationError):
    """The request body names a different user than the authenticated one."""


def get_header_user(
    authorization: Optional[str] = Header(default=None),
    x_user_id: Optional[str] = Header(default=None),
) -> Optional[str]:
    """
    User id asserted by the upstream auth layer.

    Accepts ``Authorization: Bearer <user-id>`` or ``X-User-Id``.
    """
    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            return token.strip()
    if x_user_id and x_user_id.strip():
        return x_user_id.strip()
    return None


def require_user(header_user: Optional[str], body_user: Optional[str]) -> str:
    """
    Resolve the user a request acts for.

    Only the identity asserted by the auth layer is trusted; the body's
    ``userId`` is checked against it and never used on its own.

    Raises:
        NotAuthenticatedError: if the request carries no authenticated user
        UserMismatchError: if the body names a different user
    """
    if not header_user:
        raise NotAuthenticatedError("You must be logged in to migrate data")

    body_user = body_user.strip() if body_user else None
    if body_user and body_user != header_user:
        raise UserMismatchError("Cannot migrate data to another user")
    return header_user
