"""Persistence boundaries a migration bundle can be submitted to."""

from .base import BoundaryResponse, PersistenceBoundary
from .http_boundary import HTTPPersistenceBoundary
from .local import InProcessBoundary

__all__ = [
    "BoundaryResponse",
    "PersistenceBoundary",
    "HTTPPersistenceBoundary",
    "InProcessBoundary",
]
