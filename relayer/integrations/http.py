"""
Outbound Request Runner for Relayer.

Executes the outbound HTTP call described by a RequestAction and returns
the upstream status, headers and a body parsed according to its content
type. Retry with exponential backoff lives here, not in the chain engine.

Retry Strategy:
    - Retryable errors: timeouts, network errors, 429, 5xx
    - Non-retryable: everything else (the status is passed through)
    - Backoff: exponential with jitter, capped at 60 seconds
"""

from __future__ import annotations

import asyncio
import json
import logging
import random
from dataclasses import dataclass, field
from typing import Any

import httpx

from ..engine.normalizer import ReturnType, return_type_for_content_type
from ..errors import UpstreamFault

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 7.0  # seconds
MAX_BACKOFF = 60.0

# Upstream wire-encoding headers; never forwarded with the decoded body.
TRANSPORT_HEADERS = frozenset(
    {
        "connection",
        "content-encoding",
        "content-length",
        "keep-alive",
        "transfer-encoding",
    }
)


class RetryableUpstreamFault(UpstreamFault):
    """Upstream failure that may succeed on a later attempt."""

    def __init__(self, message: str, *, retry_after: float | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


@dataclass(frozen=True, slots=True)
class OutboundResponse:
    """Result of an outbound request."""

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    content_type: str | None = None


def create_url(base_url: str | None, parameters: dict[str, Any] | None = None) -> str | None:
    """
    Append query parameters to a base URL.

    Returns None without a base URL and the base URL unchanged without
    parameters. Values are inserted as given.

    Example:
        >>> create_url("https://x/y", {"a": 1, "b": "c"})
        'https://x/y?a=1&b=c'
    """
    if base_url is None:
        return None
    if not parameters:
        return base_url

    query = "&".join(f"{key}={value}" for key, value in parameters.items())
    return f"{base_url}?{query}"


class OutboundRequestRunner:
    """
    Async HTTP client wrapper used by the executor for Request hops.

    The underlying httpx.AsyncClient is created lazily and reused across
    calls; pass one in to share a connection pool or for testing.

    Example:
        runner = OutboundRequestRunner(max_retries=2)
        response = await runner.send("https://reqres.in/api/users/2")
        await runner.close()
    """

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        max_retries: int = 0,
        retry_delay: float = 0.5,
        default_timeout: float = DEFAULT_TIMEOUT,
    ):
        self._client = client
        self._owns_client = client is None
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.default_timeout = default_timeout

    @property
    def name(self) -> str:
        return "outbound"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(follow_redirects=True)
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this runner created it."""
        if self._owns_client and self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def send(
        self,
        url: str,
        method: str = "GET",
        headers: dict[str, str] | None = None,
        body: Any = None,
        parameters: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> OutboundResponse:
        """
        Send a request, retrying retryable failures.

        Raises:
            UpstreamFault: On timeout (504), network error (502), an
                unparsable body, or once retries are exhausted
        """
        full_url = create_url(url, parameters)
        if not full_url:
            raise UpstreamFault("request has no url")

        for attempt in range(self.max_retries + 1):
            try:
                return await self._do_request(
                    method.upper(),
                    full_url,
                    headers=headers or {},
                    body=body,
                    timeout=timeout or self.default_timeout,
                )
            except RetryableUpstreamFault as e:
                if attempt >= self.max_retries:
                    if self.max_retries:
                        logger.warning(
                            f"[{self.name}] Max retries ({self.max_retries}) "
                            f"reached for {method} {full_url}"
                        )
                    raise

                backoff = self._calculate_backoff(attempt, e)
                logger.info(
                    f"[{self.name}] Retry {attempt + 1}/{self.max_retries} "
                    f"for {method} {full_url} after {backoff:.2f}s"
                )
                await asyncio.sleep(backoff)

        raise UpstreamFault(f"request to {full_url} not attempted")

    def _calculate_backoff(self, attempt: int, error: RetryableUpstreamFault) -> float:
        """Exponential backoff with ±25% jitter, honouring Retry-After."""
        if error.retry_after:
            return min(error.retry_after, MAX_BACKOFF)

        base_delay = self.retry_delay * (2**attempt)
        jitter = base_delay * 0.25 * (2 * random.random() - 1)
        return min(base_delay + jitter, MAX_BACKOFF)

    async def _do_request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        body: Any,
        timeout: float,
    ) -> OutboundResponse:
        """Execute a single HTTP request and parse the response body."""
        client = await self._get_client()

        content: str | bytes | None = None
        json_body: Any = None
        if isinstance(body, str | bytes):
            content = body
        elif body is not None:
            json_body = body

        logger.debug(f"[{self.name}] {method} {url} timeout={timeout}")

        try:
            response = await client.request(
                method,
                url,
                headers=headers,
                content=content,
                json=json_body,
                timeout=timeout,
            )
        except httpx.TimeoutException as e:
            raise RetryableUpstreamFault(f"request timeout: {url}", status_code=504) from e
        except httpx.NetworkError as e:
            raise RetryableUpstreamFault(f"network error: {url}: {e}", status_code=502) from e
        except httpx.HTTPError as e:
            raise UpstreamFault(f"request failed: {url}: {e}", status_code=502) from e

        if response.status_code == 429 or response.status_code >= 500:
            retry_after = response.headers.get("Retry-After")
            if self.max_retries:
                raise RetryableUpstreamFault(
                    f"upstream returned {response.status_code}: {url}",
                    status_code=response.status_code,
                    retry_after=_parse_retry_after(retry_after),
                )

        content_type = response.headers.get("Content-Type")
        return_type = return_type_for_content_type(content_type)
        logger.debug(
            f"[{self.name}] {method} {url} status={response.status_code} "
            f"Content-Type={content_type} returning={return_type.value}"
        )

        return OutboundResponse(
            status_code=response.status_code,
            headers={
                k: v for k, v in response.headers.items() if k.lower() not in TRANSPORT_HEADERS
            },
            body=self._parse_body(response, return_type, url),
            content_type=content_type,
        )

    def _parse_body(
        self,
        response: httpx.Response,
        return_type: ReturnType,
        url: str,
    ) -> Any:
        if return_type is not ReturnType.JSON:
            return response.text
        if not response.content:
            return None
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise UpstreamFault(f"unable to parse json from {url}", status_code=502) from e


def _parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None
