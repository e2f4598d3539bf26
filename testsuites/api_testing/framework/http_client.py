"""
================================================================================
Async HTTP Client with Allure Integration
================================================================================

The API client capability used by the runtime layer:
    - ``get/post/put/patch/delete`` returning ``ApiResponse`` objects
      exposing ``ok``, ``status``, ``status_text`` and ``json()``
    - Automatic retry with exponential backoff on network errors
    - Rate limit (429) handling with Retry-After parsing
    - Allure reporting with cURL command generation and secret masking
    - Bearer token and default header management

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, Optional

import allure
import httpx
from allure_commons.types import AttachmentType
from loguru import logger

from .config_loader import ConfigLoader


# Maximum response length to include in Allure reports
MAX_RESPONSE_LENGTH = 3000

# Default retry settings
DEFAULT_RETRY_COUNT = 3
DEFAULT_RETRY_BACKOFF = 0.5
DEFAULT_RETRY_MAX_WAIT = 5.0


class HttpClientError(Exception):
    """Base exception for HTTP client errors."""
    pass


class RateLimitExceeded(HttpClientError):
    """Raised when rate limit is exceeded and all retries are exhausted."""
    pass


class ApiResponse:
    """
    Transport-independent view of an HTTP response.

    Usage:
        >>> response = await client.post("/api/users", data=payload)
        >>> if response.ok:
        ...     user = response.json()
    """

    def __init__(self, response: httpx.Response) -> None:
        self._response = response

    @property
    def ok(self) -> bool:
        """True for 2xx status codes."""
        return self._response.is_success

    @property
    def status(self) -> int:
        return self._response.status_code

    @property
    def status_text(self) -> str:
        return self._response.reason_phrase

    @property
    def headers(self) -> httpx.Headers:
        return self._response.headers

    @property
    def text(self) -> str:
        return self._response.text

    @property
    def raw(self) -> httpx.Response:
        """Underlying httpx response."""
        return self._response

    def json(self) -> Any:
        return self._response.json()

    def __repr__(self) -> str:
        return f"<ApiResponse [{self.status} {self.status_text}]>"


class HttpClient:
    """
    Async HTTP client with built-in resilience and reporting.

    Usage:
        >>> config = ConfigLoader()
        >>> async with HttpClient(config) as client:
        ...     response = await client.get("/api/users")
        ...     print(response.json())
    """

    def __init__(
        self,
        config: Optional[ConfigLoader] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize HTTP client with configuration.

        Args:
            config: Configuration loader instance. Creates new one if None.
            transport: Optional httpx transport (e.g. ``httpx.MockTransport``)
        """
        if config is None:
            config = ConfigLoader()

        self.config = config
        self.base_url = config.get("api.base_url", "http://localhost:8000")
        self.timeout = float(config.get("api.timeout", 30.0))
        self.retry_count = int(config.get("api.retry_count", DEFAULT_RETRY_COUNT))
        self.retry_backoff = float(config.get("api.retry_backoff", DEFAULT_RETRY_BACKOFF))
        self.retry_max_wait = float(config.get("api.retry_max_wait", DEFAULT_RETRY_MAX_WAIT))

        self.default_headers: Dict[str, str] = {}
        self.session: Optional[httpx.AsyncClient] = None
        self._transport = transport

    async def __aenter__(self) -> "HttpClient":
        """Enter async context manager - open HTTP session."""
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context manager - close HTTP session."""
        await self.close()

    async def open(self) -> None:
        if self.session is None:
            self.session = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )

    async def close(self) -> None:
        if self.session is not None:
            await self.session.aclose()
            self.session = None

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_default_header(self, name: str, value: str) -> None:
        self.default_headers[name] = value

    def set_default_headers(self, headers: Dict[str, str]) -> None:
        self.default_headers.update(headers)

    def set_auth_token(self, token: str, scheme: str = "Bearer") -> None:
        """Send ``Authorization: <scheme> <token>`` with every request."""
        self.set_default_header("Authorization", f"{scheme} {token}")

    def set_base_url(self, base_url: str) -> None:
        self.base_url = base_url
        if self.session is not None:
            self.session.base_url = base_url

    def clone(self) -> "HttpClient":
        """New unopened client sharing configuration and default headers."""
        twin = HttpClient(self.config, transport=self._transport)
        twin.base_url = self.base_url
        twin.default_headers = dict(self.default_headers)
        return twin

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    async def request(
        self,
        method: str,
        url: str,
        data: Any = None,
        **kwargs: Any,
    ) -> ApiResponse:
        """
        Execute HTTP request with automatic retry and Allure logging.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE, PATCH)
            url: Request URL (relative to base_url)
            data: JSON-serializable request body
            **kwargs: Additional arguments passed to httpx

        Returns:
            ApiResponse wrapper

        Raises:
            HttpClientError: When used outside ``async with``
            RateLimitExceeded: When rate limit retries are exhausted
            httpx.HTTPError: When network retries are exhausted
        """
        if self.session is None:
            raise HttpClientError(
                "HttpClient must be opened before use. "
                "Use 'async with HttpClient() as client:'"
            )

        headers = {**self.default_headers, **kwargs.pop("headers", {})}
        kwargs["headers"] = headers
        if data is not None:
            kwargs["json"] = data

        for attempt in range(self.retry_count):
            try:
                response = await self.session.request(method, url, **kwargs)

                # Handle rate limiting
                if response.status_code == 429:
                    retry_after = self._parse_retry_after(response)
                    logger.warning(
                        f"Rate limited (429). Waiting {retry_after}s before retry. "
                        f"Attempt {attempt + 1}/{self.retry_count}"
                    )
                    await asyncio.sleep(retry_after)
                    continue

                self._log_to_allure(method, url, kwargs, response)
                return ApiResponse(response)

            except (httpx.TimeoutException, httpx.NetworkError) as e:
                if attempt < self.retry_count - 1:
                    wait_time = self._calculate_backoff(attempt)
                    logger.warning(
                        f"Network error: {e}. Retrying in {wait_time}s. "
                        f"Attempt {attempt + 1}/{self.retry_count}"
                    )
                    await asyncio.sleep(wait_time)
                else:
                    logger.error(f"All retries exhausted. Last error: {e}")
                    raise

        raise RateLimitExceeded(
            f"Rate limit exceeded after {self.retry_count} retries"
        )

    async def get(self, url: str, **kwargs: Any) -> ApiResponse:
        """Execute GET request."""
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, data: Any = None, **kwargs: Any) -> ApiResponse:
        """Execute POST request."""
        return await self.request("POST", url, data, **kwargs)

    async def put(self, url: str, data: Any = None, **kwargs: Any) -> ApiResponse:
        """Execute PUT request."""
        return await self.request("PUT", url, data, **kwargs)

    async def patch(self, url: str, data: Any = None, **kwargs: Any) -> ApiResponse:
        """Execute PATCH request."""
        return await self.request("PATCH", url, data, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> ApiResponse:
        """Execute DELETE request."""
        return await self.request("DELETE", url, **kwargs)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _parse_retry_after(self, response: httpx.Response) -> float:
        """
        Parse Retry-After header (seconds) from a 429 response.

        Returns:
            Wait time in seconds (capped at retry_max_wait)
        """
        retry_after = response.headers.get("Retry-After", "")

        try:
            wait_time = float(retry_after)
        except ValueError:
            wait_time = self.retry_backoff

        return min(wait_time, self.retry_max_wait)

    def _calculate_backoff(self, attempt: int) -> float:
        """
        Calculate exponential backoff wait time.

        Formula: base * (2 ^ attempt), capped at max_wait
        """
        wait_time = self.retry_backoff * (2 ** attempt)
        return min(wait_time, self.retry_max_wait)

    def _log_to_allure(
        self,
        method: str,
        url: str,
        kwargs: Dict[str, Any],
        response: httpx.Response,
    ) -> None:
        """
        Log HTTP request/response to Allure report.

        Attaches the request URL, masked headers and body, a cURL command,
        and the (truncated) response.
        """
        full_url = str(response.request.url) if response.request else url
        status_emoji = "✅" if response.status_code < 400 else "❌"
        step_title = f"{status_emoji} {method} {url} → {response.status_code}"

        with allure.step(step_title):
            allure.attach(
                full_url,
                name="🔗 Request URL",
                attachment_type=AttachmentType.TEXT
            )

            safe_headers = self._redact_headers(kwargs.get("headers", {}))
            if safe_headers:
                allure.attach(
                    json.dumps(safe_headers, ensure_ascii=False, indent=2),
                    name="📤 Request Headers",
                    attachment_type=AttachmentType.JSON
                )

            safe_body = self._redact_body(kwargs.get("json"))
            if safe_body:
                allure.attach(
                    json.dumps(safe_body, ensure_ascii=False, indent=2, default=str),
                    name="📤 Request Body",
                    attachment_type=AttachmentType.JSON
                )

            allure.attach(
                self._build_curl(method, full_url, safe_headers, safe_body),
                name="🔧 cURL Command",
                attachment_type=AttachmentType.TEXT
            )

            try:
                response_content = json.dumps(
                    response.json(), ensure_ascii=False, indent=2
                )
            except (json.JSONDecodeError, ValueError):
                response_content = response.text or "<empty>"

            if len(response_content) > MAX_RESPONSE_LENGTH:
                response_content = (
                    f"{response_content[:MAX_RESPONSE_LENGTH]}\n\n"
                    f"... [Truncated, full length: {len(response_content)} chars] ..."
                )

            allure.attach(
                response_content,
                name=f"📥 Response Body ({response.status_code})",
                attachment_type=AttachmentType.JSON
            )

    def _redact_headers(self, headers: Dict[str, Any]) -> Dict[str, Any]:
        """
        Mask sensitive header values before logging.
        """
        sensitive_keys = {"authorization", "x-api-key", "cookie", "set-cookie"}
        return {
            key: "***MASKED***" if key.lower() in sensitive_keys else value
            for key, value in headers.items()
        }

    def _redact_body(self, payload: Any) -> Any:
        """
        Recursively mask sensitive fields in request bodies.
        """
        if isinstance(payload, dict):
            redacted = {}
            for key, value in payload.items():
                if any(token in key.lower() for token in [
                    "password", "secret", "token", "api_key", "authorization", "ssn"
                ]):
                    redacted[key] = "***MASKED***"
                else:
                    redacted[key] = self._redact_body(value)
            return redacted
        if isinstance(payload, list):
            return [self._redact_body(item) for item in payload]
        return payload

    def _build_curl(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: Optional[Any],
    ) -> str:
        """
        Build a copy-paste ready cURL command for request reproduction.
        """
        parts = [f"curl -X {method}"]

        for key, value in headers.items():
            parts.append(f"-H '{key}: {value}'")

        if body:
            parts.append(f"-d '{json.dumps(body, ensure_ascii=False, default=str)}'")

        parts.append(f"'{url}'")

        return " \\\n  ".join(parts)


__all__ = [
    "ApiResponse",
    "HttpClient",
    "HttpClientError",
    "RateLimitExceeded",
]
