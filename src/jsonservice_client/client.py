# Copyright 2025 DataStax Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License"); you may not
# use this file except in compliance with the License. You may obtain a copy of
# the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations under
# the License.

"""Typed JSON clients for ServiceStack-style services.

Both clients map a request DTO onto one HTTP exchange and return the decoded
response DTO:

    async with JsonServiceClient("https://api.example.com") as client:
        client.set_bearer_token(token)
        response = await client.post(Hello(name="World"))
        print(response.result)

``SyncJsonServiceClient`` offers the same surface for blocking callers.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from http import HTTPStatus
from typing import Any, TypeVar

import httpx
import msgspec

from . import dto
from .config import DEFAULT_TIMEOUT, ClientConfig
from .dto import HttpMethod, ServiceRequest
from .errors import (
    ApiError,
    DeserializationError,
    SerializationError,
    TransportError,
)
from .types import DetailedResponse

logger = logging.getLogger(__name__)

ResponseT = TypeVar("ResponseT")

JSON_CONTENT_TYPE = "application/json"


def _encode(body: Any) -> bytes:
    try:
        return msgspec.json.encode(body)
    except (TypeError, msgspec.EncodeError) as exc:
        raise SerializationError(
            f"Failed to encode {type(body).__name__} as JSON: {exc}", cause=exc
        ) from exc


def _decode(content: bytes, response_type: Any) -> Any:
    if response_type is None or response_type is type(None):
        return None
    try:
        return msgspec.json.decode(content, type=response_type)
    except (msgspec.DecodeError, UnicodeDecodeError) as exc:
        name = getattr(response_type, "__name__", repr(response_type))
        raise DeserializationError(
            f"Failed to decode response as {name}: {exc}",
            body=content.decode("utf-8", errors="replace"),
            cause=exc,
        ) from exc


def _status(code: int) -> HTTPStatus | int:
    try:
        return HTTPStatus(code)
    except ValueError:
        return code


class _BaseServiceClient:
    """State and request/response handling shared by the sync and async clients."""

    def __init__(self, base_url: str, headers: Mapping[str, str] | None = None):
        self._base_url = base_url.rstrip("/")
        self._headers = dict(headers or {})
        self._bearer_token: str | None = None
        self._token_lock = threading.Lock()

    @property
    def base_url(self) -> str:
        """Base URL of the service, without a trailing slash."""
        return self._base_url

    @property
    def bearer_token(self) -> str | None:
        with self._token_lock:
            return self._bearer_token

    def set_bearer_token(self, token: str) -> None:
        """Send ``Authorization: Bearer <token>`` with every following request."""
        with self._token_lock:
            self._bearer_token = token

    def clear_bearer_token(self) -> None:
        with self._token_lock:
            self._bearer_token = None

    def _url(self, path: str) -> str:
        if not path:
            return self._base_url
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self._base_url}{path}"

    def _build_request(
        self, method: HttpMethod | str, path: str, body: Any
    ) -> dict[str, Any]:
        """Build keyword arguments for ``httpx.Client.request``.

        GET and DELETE never carry a body, even when one is supplied.
        """
        verb = HttpMethod.parse(method)
        try:
            url = httpx.URL(self._url(path))
        except httpx.InvalidURL as exc:
            raise TransportError(
                f"Invalid URL for {verb.value} {path!r}: {exc}", cause=exc
            ) from exc

        headers = {"Accept": JSON_CONTENT_TYPE, **self._headers}
        token = self.bearer_token
        if token is not None:
            headers["Authorization"] = f"Bearer {token}"

        request_kwargs: dict[str, Any] = {
            "method": verb.value,
            "url": url,
            "headers": headers,
        }
        if verb.has_body and body is not None:
            request_kwargs["content"] = _encode(body)
            headers["Content-Type"] = JSON_CONTENT_TYPE

        logger.debug("%s %s", verb.value, url)
        return request_kwargs

    def _transport_error(
        self, request_kwargs: dict[str, Any], exc: httpx.RequestError
    ) -> TransportError:
        return TransportError(
            f"{request_kwargs['method']} {request_kwargs['url']} failed: "
            f"{type(exc).__name__}: {exc}",
            cause=exc,
        )

    def _build_response(
        self, response: httpx.Response, response_type: Any
    ) -> DetailedResponse[Any]:
        logger.debug(
            "%s %s -> %d",
            response.request.method,
            response.request.url,
            response.status_code,
        )
        if not response.is_success:
            raise ApiError.from_response(response.status_code, response.content)

        return DetailedResponse(
            status_code=_status(response.status_code),
            content=response.content,
            headers=dict(response.headers),
            parsed=_decode(response.content, response_type),
        )


class JsonServiceClient(_BaseServiceClient):
    """Asynchronous client for ServiceStack JSON services.

    The verb-named methods (``get``, ``post``, ...) always use their own verb;
    ``send`` uses the verb the request DTO declares. The client is safe to
    share between tasks, including while the bearer token changes.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        headers: Mapping[str, str] | None = None,
        transport: httpx.AsyncClient | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: Base URL of the service (e.g., "https://api.example.com")
            timeout: Request timeout in seconds, used when no transport is given
            headers: Optional additional headers to include in requests
            transport: Pre-configured httpx client; the service client takes
                ownership and closes it on ``close()``
        """
        super().__init__(base_url, headers)
        self._transport = transport or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout)
        )

    @classmethod
    def with_transport(
        cls, base_url: str, transport: httpx.AsyncClient
    ) -> JsonServiceClient:
        """Create a client around an externally configured httpx client."""
        return cls(base_url, transport=transport)

    @classmethod
    def from_config(cls, config: ClientConfig) -> JsonServiceClient:
        client = cls(config.base_url, timeout=config.timeout, headers=config.headers)
        if config.bearer_token:
            client.set_bearer_token(config.bearer_token)
        return client

    @property
    def transport(self) -> httpx.AsyncClient:
        """The underlying httpx client."""
        return self._transport

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        await self._transport.aclose()

    async def __aenter__(self) -> JsonServiceClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def get(self, request: ServiceRequest[ResponseT]) -> ResponseT:
        return await self._dispatch(request, HttpMethod.GET)

    async def post(self, request: ServiceRequest[ResponseT]) -> ResponseT:
        return await self._dispatch(request, HttpMethod.POST)

    async def put(self, request: ServiceRequest[ResponseT]) -> ResponseT:
        return await self._dispatch(request, HttpMethod.PUT)

    async def delete(self, request: ServiceRequest[ResponseT]) -> ResponseT:
        return await self._dispatch(request, HttpMethod.DELETE)

    async def patch(self, request: ServiceRequest[ResponseT]) -> ResponseT:
        return await self._dispatch(request, HttpMethod.PATCH)

    async def send(self, request: ServiceRequest[ResponseT]) -> ResponseT:
        """Dispatch using the request's own ``method()``, POST if it has none."""
        return await self._dispatch(request, dto.request_method(request))

    async def send_detailed(
        self,
        request: ServiceRequest[ResponseT],
        method: HttpMethod | str | None = None,
    ) -> DetailedResponse[ResponseT]:
        """Dispatch a request and return the status and headers with the result.

        Args:
            request: The request DTO
            method: Verb to use instead of the one the DTO declares

        Raises:
            ApiError: If the service responds with a non-2xx status
        """
        verb = dto.request_method(request) if method is None else method
        return await self._exchange(
            verb, dto.request_path(request), request, dto.response_type(request)
        )

    async def request(
        self,
        method: HttpMethod | str,
        path: str,
        body: Any = None,
        *,
        response_type: Any = Any,
    ) -> Any:
        """Make a request without a request DTO.

        Args:
            method: The HTTP method (GET, POST, etc.)
            path: The API endpoint path, e.g. "/hello/World"
            body: Optional body, anything msgspec can encode
            response_type: Type to decode the response into

        Returns:
            The decoded response
        """
        return (await self._exchange(method, path, body, response_type)).parsed

    async def _dispatch(self, request: ServiceRequest[Any], method: HttpMethod) -> Any:
        response = await self._exchange(
            method, dto.request_path(request), request, dto.response_type(request)
        )
        return response.parsed

    async def _exchange(
        self, method: HttpMethod | str, path: str, body: Any, response_type: Any
    ) -> DetailedResponse[Any]:
        request_kwargs = self._build_request(method, path, body)
        try:
            response = await self._transport.request(**request_kwargs)
        except httpx.RequestError as exc:
            raise self._transport_error(request_kwargs, exc) from exc
        return self._build_response(response, response_type)


class SyncJsonServiceClient(_BaseServiceClient):
    """Blocking counterpart of ``JsonServiceClient``.

    Safe to share between threads; each call blocks its thread until the
    exchange completes or fails.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        headers: Mapping[str, str] | None = None,
        transport: httpx.Client | None = None,
    ):
        super().__init__(base_url, headers)
        self._transport = transport or httpx.Client(timeout=httpx.Timeout(timeout))

    @classmethod
    def with_transport(
        cls, base_url: str, transport: httpx.Client
    ) -> SyncJsonServiceClient:
        return cls(base_url, transport=transport)

    @classmethod
    def from_config(cls, config: ClientConfig) -> SyncJsonServiceClient:
        client = cls(config.base_url, timeout=config.timeout, headers=config.headers)
        if config.bearer_token:
            client.set_bearer_token(config.bearer_token)
        return client

    @property
    def transport(self) -> httpx.Client:
        return self._transport

    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> SyncJsonServiceClient:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def get(self, request: ServiceRequest[ResponseT]) -> ResponseT:
        return self._dispatch(request, HttpMethod.GET)

    def post(self, request: ServiceRequest[ResponseT]) -> ResponseT:
        return self._dispatch(request, HttpMethod.POST)

    def put(self, request: ServiceRequest[ResponseT]) -> ResponseT:
        return self._dispatch(request, HttpMethod.PUT)

    def delete(self, request: ServiceRequest[ResponseT]) -> ResponseT:
        return self._dispatch(request, HttpMethod.DELETE)

    def patch(self, request: ServiceRequest[ResponseT]) -> ResponseT:
        return self._dispatch(request, HttpMethod.PATCH)

    def send(self, request: ServiceRequest[ResponseT]) -> ResponseT:
        return self._dispatch(request, dto.request_method(request))

    def send_detailed(
        self,
        request: ServiceRequest[ResponseT],
        method: HttpMethod | str | None = None,
    ) -> DetailedResponse[ResponseT]:
        verb = dto.request_method(request) if method is None else method
        return self._exchange(
            verb, dto.request_path(request), request, dto.response_type(request)
        )

    def request(
        self,
        method: HttpMethod | str,
        path: str,
        body: Any = None,
        *,
        response_type: Any = Any,
    ) -> Any:
        return self._exchange(method, path, body, response_type).parsed

    def _dispatch(self, request: ServiceRequest[Any], method: HttpMethod) -> Any:
        return self._exchange(
            method, dto.request_path(request), request, dto.response_type(request)
        ).parsed

    def _exchange(
        self, method: HttpMethod | str, path: str, body: Any, response_type: Any
    ) -> DetailedResponse[Any]:
        request_kwargs = self._build_request(method, path, body)
        try:
            response = self._transport.request(**request_kwargs)
        except httpx.RequestError as exc:
            raise self._transport_error(request_kwargs, exc) from exc
        return self._build_response(response, response_type)


__all__ = ["JsonServiceClient", "SyncJsonServiceClient"]
