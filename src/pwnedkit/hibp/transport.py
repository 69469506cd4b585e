"""
HTTP transport shared by all HIBP API resources.

Builds authenticated requests, handles HTTP 429 rate limiting and hands
back either the whole body or an incremental line stream.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import asyncio
import json
import logging
import math
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import aiohttp

from pwnedkit.errors import (
    HIBPConnectionError,
    NonPositiveResponseError,
    RateLimitError,
    ResponseDecodeError,
    StreamReadError,
)
from pwnedkit.hibp.config import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)


def parse_retry_after(value: str | None) -> float:
    """Convert a Retry-After header (seconds) into a delay.

    Raises:
        ValueError: header missing, not a number or negative
    """
    if value is None:
        raise ValueError("missing Retry-After header")
    delay = float(value.strip())
    if delay < 0 or not math.isfinite(delay):
        raise ValueError(f"invalid Retry-After value: {value!r}")
    return delay


def expect_json_list(data: Any, url: str) -> list:
    if not isinstance(data, list):
        raise ResponseDecodeError(f"Expected a JSON array from {url}")
    return data


def expect_json_object(data: Any, url: str) -> dict:
    if not isinstance(data, dict):
        raise ResponseDecodeError(f"Expected a JSON object from {url}")
    return data


class HTTPTransport:
    """Authenticated HTTP access to the HIBP APIs."""

    def __init__(
        self,
        api_key: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        rate_limit_sleep: bool = False,
        max_rate_limit_retries: int = 1,
        session: aiohttp.ClientSession | None = None,
        extra_headers: dict[str, str] | None = None,
    ):
        """Initialize transport.

        Args:
            api_key: HIBP API key, sent as ``hibp-api-key`` when set
            user_agent: User-Agent header (empty keeps the default)
            timeout: Total request timeout in seconds
            rate_limit_sleep: Sleep and retry on HTTP 429 instead of failing
            max_rate_limit_retries: Retries allowed per request after a 429
            session: Externally managed session (not closed by us)
            extra_headers: Headers added to every request
        """
        self.api_key = api_key
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self.timeout = timeout if timeout and timeout > 0 else DEFAULT_TIMEOUT
        self.rate_limit_sleep = rate_limit_sleep
        self.max_rate_limit_retries = max(0, max_rate_limit_retries)
        self.extra_headers = dict(extra_headers or {})
        self._session = session
        self._owns_session = session is None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure HTTP session exists."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close HTTP session if we created it."""
        if self._session and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> "HTTPTransport":
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def build_headers(self, headers: dict[str, str] | None = None) -> dict[str, str]:
        """Headers sent with every request."""
        request_headers = {
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }
        if self.api_key:
            request_headers["hibp-api-key"] = self.api_key

        request_headers.update(self.extra_headers)
        if headers:
            request_headers.update(headers)
        return request_headers

    @asynccontextmanager
    async def _response(
        self,
        url: str,
        params: dict[str, str] | None,
        headers: dict[str, str] | None,
    ) -> AsyncIterator[aiohttp.ClientResponse]:
        """GET ``url`` and yield the HTTP 200 response, retrying on 429."""
        session = await self._ensure_session()
        request_headers = self.build_headers(headers)
        retries = 0

        while True:
            try:
                response = await session.get(
                    url,
                    params=params or None,
                    headers=request_headers,
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                )
            except (aiohttp.InvalidURL, ValueError) as e:
                raise HIBPConnectionError(f"Invalid request URL {url}: {e}") from e
            except asyncio.TimeoutError as e:
                raise HIBPConnectionError(f"Request timeout: {url}") from e
            except aiohttp.ClientError as e:
                raise HIBPConnectionError(f"Request failed: {e}") from e

            try:
                if response.status == 429:
                    delay = self._rate_limit_delay(response, retries)
                    logger.warning(f"API rate limit hit. Retrying request in {delay}s")
                    await asyncio.sleep(delay)
                    retries += 1
                    continue

                if response.status != 200:
                    raise NonPositiveResponseError(response.status, response.reason)

                yield response
                return
            finally:
                response.release()

    def _rate_limit_delay(self, response: aiohttp.ClientResponse, retries: int) -> float:
        """Delay before retrying a 429, or raise if we must give up."""
        retry_after = response.headers.get("Retry-After")

        if not self.rate_limit_sleep:
            raise RateLimitError(response.reason, retry_after)
        if retries >= self.max_rate_limit_retries:
            raise RateLimitError(
                response.reason, retry_after, detail="rate limit retries exhausted"
            )
        try:
            return parse_retry_after(retry_after)
        except ValueError as e:
            raise RateLimitError(response.reason, retry_after, detail=str(e)) from e

    async def get_bytes(
        self,
        url: str,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> bytes:
        """GET ``url`` and return the full response body.

        Raises:
            HIBPConnectionError: request could not be sent
            NonPositiveResponseError: non-200 status (RateLimitError for 429)
            StreamReadError: body could not be read
        """
        async with self._response(url, params, headers) as response:
            try:
                return await response.read()
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                raise StreamReadError(f"Failed reading response body: {e}") from e

    async def get_lines(
        self,
        url: str,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> AsyncIterator[str]:
        """GET ``url`` and yield the response body line by line.

        ``\\n`` and ``\\r\\n`` terminators are both stripped. Status errors
        are raised before the first line is produced.
        """
        async with self._response(url, params, headers) as response:
            charset = response.charset or "utf-8"
            while True:
                try:
                    raw = await response.content.readline()
                except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
                    raise StreamReadError(f"Failed reading response stream: {e}") from e
                if not raw:
                    break
                yield raw.decode(charset, errors="replace").rstrip("\r\n")

    async def get_json(
        self,
        url: str,
        params: dict[str, str] | None = None,
    ) -> Any:
        """GET ``url`` and decode the JSON body.

        Raises:
            ResponseDecodeError: body is not valid JSON
        """
        body = await self.get_bytes(url, params)
        try:
            return json.loads(body)
        except ValueError as e:
            raise ResponseDecodeError(f"Invalid JSON from {url}: {e}") from e
