"""Pydantic models for API requests and responses."""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from ..models.migration import MigratedCounts


# Request Models
class MigrateRequest(BaseModel):
    userId: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    version: str = "1.0.0"


# Response Models
class MigratedCountsModel(BaseModel):
    savedJobs: int = 0
    savedSearches: int = 0
    applications: int = 0
    jobBoards: int = 0
    searchResults: int = 0
    profile: bool = False

    @classmethod
    def from_counts(cls, counts: MigratedCounts) -> "MigratedCountsModel":
        return cls(**counts.to_dict())


class MigrateResponse(BaseModel):
    success: bool
    migrated: MigratedCountsModel = Field(default_factory=MigratedCountsModel)
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    message: str
