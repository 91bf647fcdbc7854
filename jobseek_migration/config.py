"""Runtime configuration for the migration service."""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


@dataclass
class Settings:
    """Settings shared by the API, the CLI and the executor."""
    # DynamoDB single-table store
    users_table: str = "jobseek-users"
    aws_region: str = "us-east-1"
    dynamodb_endpoint_url: Optional[str] = None  # Local DynamoDB / moto server
    anonymous_index: str = "anonymousId-index"

    # Migration endpoint
    migration_api_url: str = "http://localhost:3000/api/auth/migrate"
    migration_version: str = "1.0.0"
    request_timeout: float = 30.0

    # Local anonymous store
    store_path: str = "./data/anonymous_store.json"

    # Retry options
    max_retries: int = 3
    backoff_factor: float = 2.0  # HTTP retries
    retry_base_delay: float = 0.1  # DynamoDB retries, seconds

    cors_origins: List[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "users_table": self.users_table,
            "aws_region": self.aws_region,
            "dynamodb_endpoint_url": self.dynamodb_endpoint_url,
            "anonymous_index": self.anonymous_index,
            "migration_api_url": self.migration_api_url,
            "migration_version": self.migration_version,
            "request_timeout": self.request_timeout,
            "store_path": self.store_path,
            "max_retries": self.max_retries,
            "backoff_factor": self.backoff_factor,
            "retry_base_delay": self.retry_base_delay,
            "cors_origins": self.cors_origins,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        """Create from dictionary representation."""
        return cls(
            users_table=data.get("users_table", "jobseek-users"),
            aws_region=data.get("aws_region", "us-east-1"),
            dynamodb_endpoint_url=data.get("dynamodb_endpoint_url"),
            anonymous_index=data.get("anonymous_index", "anonymousId-index"),
            migration_api_url=data.get(
                "migration_api_url", "http://localhost:3000/api/auth/migrate"
            ),
            migration_version=data.get("migration_version", "1.0.0"),
            request_timeout=float(data.get("request_timeout", 30.0)),
            store_path=data.get("store_path", "./data/anonymous_store.json"),
            max_retries=int(data.get("max_retries", 3)),
            backoff_factor=float(data.get("backoff_factor", 2.0)),
            retry_base_delay=float(data.get("retry_base_delay", 0.1)),
            cors_origins=list(data.get("cors_origins", DEFAULT_CORS_ORIGINS)),
        )

    @classmethod
    def from_env(cls) -> "Settings":
        """Create from environment variables, falling back to defaults."""
        data: Dict[str, Any] = {}
        env_map = {
            "DYNAMODB_USERS_TABLE": "users_table",
            "AWS_REGION": "aws_region",
            "DYNAMODB_ENDPOINT_URL": "dynamodb_endpoint_url",
            "DYNAMODB_ANONYMOUS_INDEX": "anonymous_index",
            "MIGRATION_API_URL": "migration_api_url",
            "MIGRATION_VERSION": "migration_version",
            "MIGRATION_REQUEST_TIMEOUT": "request_timeout",
            "JOBSEEK_STORE_PATH": "store_path",
            "MIGRATION_MAX_RETRIES": "max_retries",
        }
        for env_name, key in env_map.items():
            value = os.environ.get(env_name)
            if value:
                data[key] = value

        origins = os.environ.get("CORS_ORIGINS")
        if origins:
            data["cors_origins"] = [o.strip() for o in origins.split(",") if o.strip()]

        return cls.from_dict(data)
