"""
Asynchronous HTTP client with retry and timeout handling.

This module provides an async HTTP client built on aiohttp with:
- Automatic retry with exponential backoff on connection failures and timeouts
- A cap on concurrent in-flight requests
- Request logging
- Translation of transport errors into the Dynamoscan exception hierarchy
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp
from aiohttp import ClientResponse, ClientSession, ClientTimeout

from ..exceptions import (
    APIConnectionError,
    APIResponseError,
    APITimeoutError,
    ConfigurationError,
)
from .error_handling import async_handle_errors, async_retry_on_failure
from .logger import get_logger

USER_AGENT = "Dynamoscan/1.0"


class AsyncAPIClient:
    """Asynchronous HTTP client with retry features."""

    def __init__(
        self,
        base_url: str = "",
        timeout: int = 30,
        max_retries: int = 3,
        retry_delay: float = 0.5,
        backoff_factor: float = 2.0,
        max_concurrency: int = 64,
        verify_ssl: bool = True,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """Initialize the async HTTP client.

        Args:
            base_url: Base URL for all requests
            timeout: Default timeout in seconds
            max_retries: Maximum number of retry attempts
            retry_delay: Initial delay between retries in seconds
            backoff_factor: Multiplier for exponential backoff
            max_concurrency: Maximum number of simultaneous requests
            verify_ssl: Whether to verify SSL certificates
            logger: Custom logger instance

        Raises:
            ConfigurationError: If configuration is invalid
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = ClientTimeout(total=timeout)
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.backoff_factor = backoff_factor
        self.max_concurrency = max_concurrency
        self.verify_ssl = verify_ssl
        self.logger = logger or get_logger('api.client')
        self._session: Optional[ClientSession] = None
        self._semaphore: Optional[asyncio.Semaphore] = None

        self._validate_config()

    def _validate_config(self) -> None:
        """Validate the client configuration.

        Raises:
            ConfigurationError: If any configuration is invalid
        """
        if self.max_retries < 0:
            raise ConfigurationError("max_retries must be >= 0")
        if self.retry_delay <= 0:
            raise ConfigurationError("retry_delay must be > 0")
        if self.backoff_factor < 1.0:
            raise ConfigurationError("backoff_factor must be >= 1.0")
        if self.max_concurrency <= 0:
            raise ConfigurationError("max_concurrency must be > 0")

    async def __aenter__(self) -> 'AsyncAPIClient':
        """Async context manager entry."""
        _ = self.session
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    @property
    def session(self) -> ClientSession:
        """The underlying session, created on first use inside the event loop."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self.timeout,
                headers={
                    "User-Agent": USER_AGENT,
                    "Accept": "application/json",
                },
            )
            self._semaphore = asyncio.Semaphore(self.max_concurrency)
        return self._session

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    def _url(self, endpoint: str) -> str:
        if endpoint.startswith(('http://', 'https://')):
            return endpoint
        if not endpoint:
            return self.base_url
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def _log_request(self, method: str, url: str, status: int) -> None:
        self.logger.debug("%s %s -> %d", method, url, status)

    @async_retry_on_failure(exceptions=(APIConnectionError, APITimeoutError))
    @async_handle_errors(
        exceptions=(aiohttp.ClientError, asyncio.TimeoutError),
        log_level=logging.DEBUG,
        error_mapping={
            asyncio.TimeoutError: lambda e: APITimeoutError(f"Request timed out: {e}"),
            aiohttp.ClientResponseError: lambda e: APIResponseError(
                status=getattr(e, "status", 0), message=getattr(e, "message", str(e))
            ),
            aiohttp.ClientError: lambda e: APIConnectionError(f"Connection error: {e}"),
        },
    )
    async def _make_request(self, method: str, endpoint: str, **kwargs: Any) -> Dict[str, Any]:
        """Make an HTTP request and return the decoded JSON body.

        Raises:
            APITimeoutError: If the request times out
            APIConnectionError: If there's a connection error
            APIResponseError: If the API returns an error response
        """
        url = self._url(endpoint)
        session = self.session
        kwargs.setdefault('ssl', self.verify_ssl)

        async with self._semaphore:
            async with session.request(method, url, **kwargs) as response:
                self._log_request(method, url, response.status)
                return await self._handle_response(response)

    async def _handle_response(self, response: ClientResponse) -> Dict[str, Any]:
        """Decode a JSON response, raising on non-2xx statuses."""
        if response.status >= 400:
            try:
                error_data = await response.json(content_type=None)
            except ValueError:
                error_data = {}
            if not isinstance(error_data, dict):
                error_data = {"detail": error_data}
            raise APIResponseError(
                status=response.status,
                message=str(error_data.get("message", response.reason)),
                response_data=error_data,
            )

        try:
            data = await response.json(content_type=None)
        except ValueError as e:
            raise APIResponseError(
                status=response.status, message=f"Invalid JSON in response: {e}"
            ) from e
        if not isinstance(data, dict):
            raise APIResponseError(status=response.status, message="Expected a JSON object")
        return data

    async def get(self, endpoint: str, *, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Make a GET request."""
        return await self._make_request("GET", endpoint, params=params)

    async def post(self, endpoint: str, *, json_data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Make a POST request with a JSON body."""
        return await self._make_request("POST", endpoint, json=json_data)
