"""
Application settings for Relayer.

Settings are read from RELAYER_* environment variables once and cached.
The lifecycle manager may load an environment file on re-initialization,
which updates os.environ and clears the cache.

Security:
    Nothing here holds the API secret itself; that lives in SessionState
    and is fetched from the secret store.
"""

from __future__ import annotations

import json
import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

ENV_PREFIX = "RELAYER_"


class AppSettings(BaseModel):
    """
    Application settings model.

    Used for type-safe settings access.
    """

    # Service identity
    service_name: str = "relayer"
    api_name: str = Field("relayer", description="API name, first path segment")
    api_version: str = Field("v1", description="API version, second path segment")
    environment: str = Field("development", description="Deployment environment")
    region: str = Field("us-east-1", description="Default cloud region")
    debug: bool = False

    # Chain engine
    max_hops: int = Field(10, ge=1, description="Maximum hops per call")
    secret_refresh_seconds: float = Field(1800.0, gt=0, description="Secret freshness window")

    # Outbound requests
    request_timeout: float = Field(7.0, gt=0)
    request_max_retries: int = Field(0, ge=0)
    request_retry_delay: float = Field(0.5, ge=0)

    # Secrets
    allow_secret_write: bool = Field(False, description="Permit Secret POST hops")
    secret_store: Literal["memory", "aws"] = "memory"
    secrets_endpoint_url: str | None = None

    # Documents and local overrides
    documents_root: str = "."
    environment_file: str | None = Field(None, description="JSON file loaded into os.environ")
    event_override_file: str | None = Field(None, description="JSON event replacing inbound")

    class Config:
        extra = "ignore"


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


def _env_bool(name: str, default: str = "false") -> bool:
    return (_env(name, default) or default).lower() == "true"


@lru_cache()
def get_settings() -> AppSettings:
    """
    Get application settings from environment.

    Uses lru_cache for singleton pattern.
    """
    return AppSettings(
        # Service
        service_name=_env("SERVICE_NAME", "relayer"),
        api_name=_env("API_NAME", "relayer"),
        api_version=_env("API_VERSION", "v1"),
        environment=_env("ENVIRONMENT", "development"),
        region=_env("REGION", "us-east-1"),
        debug=_env_bool("DEBUG"),
        # Chain engine
        max_hops=int(_env("MAX_HOPS", "10")),
        secret_refresh_seconds=float(_env("SECRET_REFRESH_SECONDS", "1800")),
        # Outbound requests
        request_timeout=float(_env("REQUEST_TIMEOUT", "7.0")),
        request_max_retries=int(_env("REQUEST_MAX_RETRIES", "0")),
        request_retry_delay=float(_env("REQUEST_RETRY_DELAY", "0.5")),
        # Secrets
        allow_secret_write=_env_bool("ALLOW_SECRET_WRITE"),
        secret_store=_env("SECRET_STORE", "memory"),
        secrets_endpoint_url=_env("SECRETS_ENDPOINT_URL"),
        # Documents and overrides
        documents_root=_env("DOCUMENTS_ROOT", "."),
        environment_file=_env("ENVIRONMENT_FILE"),
        event_override_file=_env("EVENT_OVERRIDE_FILE"),
    )


def load_environment_file(path: str | Path) -> bool:
    """
    Copy the keys of a JSON object file into os.environ.

    Clears the settings cache so the next get_settings() sees the values.
    Returns False if the file does not exist.
    """
    file_path = Path(path)
    if not file_path.is_file():
        return False

    data = json.loads(file_path.read_text())
    if not isinstance(data, dict):
        raise ValueError(f"environment file {file_path} must hold a JSON object")

    for key, value in data.items():
        os.environ[str(key)] = str(value)

    get_settings.cache_clear()
    logger.info(f"Loaded {len(data)} environment values from {file_path}")
    return True
