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

"""Errors raised by the service clients.

Every failed dispatch raises exactly one subclass of ``ServiceClientError``:

- ``TransportError``: the HTTP exchange itself failed (connect, DNS, TLS, timeout).
- ``ApiError``: the service answered with a non-2xx status.
- ``DeserializationError``: the 2xx body did not match the declared response type.
- ``SerializationError``: the request body could not be encoded.
- ``UnsupportedMethodError``: the verb is not one the client can send.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any

import msgspec


class ResponseError(msgspec.Struct, kw_only=True):
    """A single field-level validation error reported by the service."""

    errorCode: str | None = None
    fieldName: str | None = None
    message: str | None = None
    meta: dict[str, str] | None = None


class ResponseStatus(msgspec.Struct, kw_only=True):
    """The ``responseStatus`` block ServiceStack attaches to error responses."""

    errorCode: str | None = None
    message: str | None = None
    stackTrace: str | None = None
    errors: list[ResponseError] | None = None
    meta: dict[str, str] | None = None


def _camel_keys(value: dict[Any, Any]) -> dict[Any, Any]:
    # Services may serialize with PascalCase ("ResponseStatus", "ErrorCode").
    return {
        (k[:1].lower() + k[1:] if isinstance(k, str) else k): v
        for k, v in value.items()
    }


def _response_status(data: dict[Any, Any]) -> ResponseStatus | None:
    raw = data.get("responseStatus", data.get("ResponseStatus"))
    if not isinstance(raw, dict):
        return None
    raw = _camel_keys(raw)
    errors = raw.get("errors")
    if isinstance(errors, list):
        raw["errors"] = [
            _camel_keys(e) if isinstance(e, dict) else e for e in errors
        ]
    try:
        return msgspec.convert(raw, ResponseStatus)
    except msgspec.ValidationError:
        return None


class ServiceClientError(Exception):
    """Base exception for all client errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TransportError(ServiceClientError):
    """The request never produced an HTTP response."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause


class ApiError(ServiceClientError):
    """The service responded with a status outside 200-299."""

    def __init__(
        self,
        status_code: int,
        message: str,
        body: str = "",
        response_status: ResponseStatus | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.response_status = response_status

    def __str__(self) -> str:
        return f"API error {self.status_code}: {self.message}"

    @property
    def error_code(self) -> str | None:
        if self.response_status is None:
            return None
        return self.response_status.errorCode

    @property
    def field_errors(self) -> list[ResponseError]:
        if self.response_status is None or not self.response_status.errors:
            return []
        return list(self.response_status.errors)

    @classmethod
    def from_response(cls, status_code: int, content: bytes) -> ApiError:
        """Build an error from a raw response, extracting a message where possible.

        The message comes from, in order: the ServiceStack ``responseStatus``
        block, a top-level ``message`` field, the body text, and finally the
        standard reason phrase for the status code.
        """
        body = content.decode("utf-8", errors="replace")
        response_status = None
        message = None

        try:
            data = msgspec.json.decode(content)
        except (msgspec.DecodeError, UnicodeDecodeError):
            data = None

        if isinstance(data, dict):
            response_status = _response_status(data)
            if response_status is not None:
                message = response_status.message or response_status.errorCode
            top_message = data.get("message", data.get("Message"))
            if not message and isinstance(top_message, str):
                message = top_message

        if not message:
            message = body.strip()
        if not message:
            try:
                message = HTTPStatus(status_code).phrase
            except ValueError:
                message = f"HTTP status {status_code}"

        return cls(
            status_code,
            message,
            body=body,
            response_status=response_status,
        )


class DeserializationError(ServiceClientError):
    """A successful response body did not match the declared response type."""

    def __init__(
        self, message: str, body: str = "", cause: BaseException | None = None
    ):
        super().__init__(message)
        self.body = body
        self.cause = cause


class SerializationError(ServiceClientError):
    """A request body could not be encoded as JSON."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause


class UnsupportedMethodError(ServiceClientError):
    """The HTTP verb is not one of GET, POST, PUT, DELETE or PATCH."""

    def __init__(self, method: str):
        super().__init__(f"Unsupported HTTP method: {method}")
        self.method = method


__all__ = [
    "ApiError",
    "DeserializationError",
    "ResponseError",
    "ResponseStatus",
    "SerializationError",
    "ServiceClientError",
    "TransportError",
    "UnsupportedMethodError",
]
