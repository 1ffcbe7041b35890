"""
Secret stores for Relayer.

A secret store reads and writes opaque credential mappings by id. Stores
never raise: a failed read returns None and a failed write returns None,
and the caller decides what an empty result means.

Implementations:
    InMemorySecretStore  process-local dict, used for tests and local runs
    AWSSecretStore       AWS Secrets Manager through boto3
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

if TYPE_CHECKING:
    from ..config import AppSettings

logger = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-1"


@runtime_checkable
class SecretStore(Protocol):
    """
    Storage for secrets.

    ``get`` returns the secret mapping or None; ``store`` returns a
    confirmation mapping or None on failure.
    """

    async def get(self, secret_id: str, region: str | None = None) -> dict[str, Any] | None:
        ...

    async def store(
        self,
        secret_id: str,
        secret: Any,
        region: str | None = None,
    ) -> dict[str, Any] | None:
        ...


def coerce_secret(secret: Any) -> dict[str, Any] | None:
    """Secrets are stored as JSON objects; accept a mapping or JSON text."""
    if isinstance(secret, Mapping):
        return dict(secret)
    if isinstance(secret, str | bytes):
        try:
            value = json.loads(secret)
        except ValueError:
            return None
        return value if isinstance(value, dict) else None
    return None


class InMemorySecretStore:
    """Dictionary-backed secret store keyed by (region, secret id)."""

    def __init__(
        self,
        secrets: Mapping[str, Mapping[str, Any]] | None = None,
        *,
        region: str = DEFAULT_REGION,
    ):
        self.region = region
        self._secrets: dict[tuple[str, str], dict[str, Any]] = {}
        for secret_id, value in (secrets or {}).items():
            self._secrets[(region, secret_id)] = dict(value)

    async def get(self, secret_id: str, region: str | None = None) -> dict[str, Any] | None:
        value = self._secrets.get((region or self.region, secret_id))
        if value is None:
            logger.error(f"|{secret_id}| not found in memory secret store")
            return None
        return dict(value)

    async def store(
        self,
        secret_id: str,
        secret: Any,
        region: str | None = None,
    ) -> dict[str, Any] | None:
        value = coerce_secret(secret)
        if value is None:
            logger.error(f"secret storage: |{secret_id}| value is not a JSON object")
            return None
        self._secrets[(region or self.region, secret_id)] = value
        return {"secretId": secret_id, "stored": True}


class AWSSecretStore:
    """
    AWS Secrets Manager store.

    One boto3 client per region, created lazily. boto3 is blocking, so each
    call runs in a worker thread.
    """

    def __init__(
        self,
        *,
        region: str = DEFAULT_REGION,
        endpoint_url: str | None = None,
        max_attempts: int = 3,
    ):
        self.region = region
        self.endpoint_url = endpoint_url
        self.max_attempts = max_attempts
        self._clients: dict[str, Any] = {}

    def _get_client(self, region: str | None) -> Any:
        region = region or self.region
        if region not in self._clients:
            self._clients[region] = boto3.client(
                "secretsmanager",
                region_name=region,
                endpoint_url=self.endpoint_url if region == self.region else None,
                config=Config(retries={"max_attempts": self.max_attempts, "mode": "standard"}),
            )
        return self._clients[region]

    async def get(self, secret_id: str, region: str | None = None) -> dict[str, Any] | None:
        logger.debug(f"retrieving |{secret_id}| from AWS Secrets Manager")
        try:
            data = await asyncio.to_thread(
                self._get_client(region).get_secret_value,
                SecretId=secret_id,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"|{secret_id}| not retrieved from AWS Secrets Manager: {e}")
            return None

        secret_string = data.get("SecretString")
        if not secret_string:
            # Binary secrets are not supported
            logger.error(f"|{secret_id}| has no SecretString")
            return None

        value = coerce_secret(secret_string)
        if value is None:
            logger.error(f"|{secret_id}| SecretString is not a JSON object")
        return value

    async def store(
        self,
        secret_id: str,
        secret: Any,
        region: str | None = None,
    ) -> dict[str, Any] | None:
        value = coerce_secret(secret)
        if value is None:
            logger.error(f"secret storage: |{secret_id}| value is not a JSON object")
            return None

        try:
            data = await asyncio.to_thread(
                self._get_client(region).put_secret_value,
                SecretId=secret_id,
                SecretString=json.dumps(value),
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"secret storage: |{secret_id}|: {e}")
            return None

        return {
            "secretId": secret_id,
            "versionId": data.get("VersionId"),
            "stored": True,
        }


def create_secret_store(settings: AppSettings) -> SecretStore:
    """Build the secret store selected by settings."""
    if settings.secret_store == "aws":
        return AWSSecretStore(
            region=settings.region,
            endpoint_url=settings.secrets_endpoint_url,
        )
    return InMemorySecretStore(region=settings.region)
