"""
HTTP request client for marketplace pages and JSON endpoints.

One GET per call, a fixed total timeout and no retries: a failed attempt is
final for that invocation and surfaces as a NetworkException or
TimeoutException for the caller to absorb.
"""

import asyncio
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Dict, Any, Optional
from urllib.parse import urlparse

import aiohttp

from ..config.settings import REQUEST_TIMEOUT_SECONDS, USER_AGENT
from ..exceptions.scraping_exceptions import (
    NetworkException, TimeoutException, ParseException
)


@dataclass
class RequestConfig:
    """Configuration for HTTP requests with sensible defaults."""
    timeout: float = REQUEST_TIMEOUT_SECONDS
    user_agent: str = USER_AGENT
    extra_headers: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.timeout <= 0:
            raise ValueError("Timeout must be positive")
        if not self.user_agent:
            raise ValueError("User agent cannot be empty")

    def headers(self, accept: Optional[str] = None) -> Dict[str, str]:
        headers = {'User-Agent': self.user_agent}
        headers.update(self.extra_headers)
        if accept:
            headers['Accept'] = accept
        return headers


@dataclass
class RequestResult:
    """Result of an HTTP request with metadata."""
    status_code: int
    body: str
    url: str
    elapsed_time: float
    content_type: str = ""


class HttpRequestClient:
    """
    aiohttp based client used by every collector and resolver.

    Usable as an async context manager to share one session across several
    calls; otherwise every request opens and closes its own session, so
    overlapping calls never share connection state.
    """

    def __init__(self, config: Optional[RequestConfig] = None,
                 session: Optional[aiohttp.ClientSession] = None):
        self.config = config or RequestConfig()
        self.logger = logging.getLogger(f"{__name__}.HttpRequestClient")
        self.session = session
        self._owns_session = False

    async def __aenter__(self):
        if self.session is None:
            self.session = self._create_session()
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._owns_session and self.session:
            await self.session.close()
            self.session = None
            self._owns_session = False

    def _create_session(self) -> aiohttp.ClientSession:
        timeout = aiohttp.ClientTimeout(total=self.config.timeout)
        return aiohttp.ClientSession(timeout=timeout)

    async def get_text(self, url: str, params: Optional[Dict[str, Any]] = None,
                       accept: Optional[str] = None) -> str:
        """Fetch a document body as text."""
        result = await self.get(url, params=params, accept=accept)
        return result.body

    async def get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Fetch and decode a JSON payload."""
        result = await self.get(url, params=params, accept="application/json")
        try:
            return json.loads(result.body) if result.body.strip() else None
        except ValueError as e:
            raise ParseException(f"Invalid JSON from {url}", details=str(e))

    async def get(self, url: str, params: Optional[Dict[str, Any]] = None,
                  accept: Optional[str] = None) -> RequestResult:
        """
        Perform a single GET request.

        Raises:
            NetworkException: transport errors and non-2xx responses
            TimeoutException: when the configured timeout elapses
        """
        parsed_url = urlparse(url)
        if not parsed_url.scheme or not parsed_url.netloc:
            raise NetworkException(f"Invalid URL format: {url}")

        if self.session is not None:
            return await self._make_request(self.session, url, params, accept)

        # Per-call session; nothing is stored on the client
        async with self._create_session() as session:
            return await self._make_request(session, url, params, accept)

    async def _make_request(self, session: aiohttp.ClientSession, url: str,
                            params: Optional[Dict[str, Any]],
                            accept: Optional[str]) -> RequestResult:
        start_time = time.time()
        self.logger.debug(f"GET {url} params={params}")

        try:
            async with session.get(url, params=params,
                                   headers=self.config.headers(accept)) as response:
                if response.status < 200 or response.status >= 300:
                    raise NetworkException(
                        f"GET {url} returned status {response.status}",
                        status_code=response.status
                    )
                try:
                    body = await response.text()
                except UnicodeDecodeError as e:
                    raise ParseException(f"Undecodable body from {url}", details=str(e))
                content_type = response.headers.get('Content-Type', '') if response.headers else ''
                status = response.status
        except asyncio.TimeoutError as e:
            raise TimeoutException(f"GET {url} timed out after {self.config.timeout}s", details=str(e))
        except aiohttp.ClientError as e:
            raise NetworkException(f"GET {url} failed: {e}")

        elapsed_time = time.time() - start_time
        self.logger.debug(f"GET {url} -> {status} in {elapsed_time:.2f}s")
        return RequestResult(
            status_code=status,
            body=body,
            url=url,
            elapsed_time=elapsed_time,
            content_type=content_type
        )
