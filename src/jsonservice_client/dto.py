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

"""Request DTO conventions.

A request DTO is any object that knows where it is sent:

    class Hello(msgspec.Struct):
        Response: ClassVar[type] = HelloResponse

        name: str

        def path(self) -> str:
            return "/hello"

It may also define ``method()`` to choose its own HTTP verb (POST when absent).
The ``route`` decorator generates both from a path template:

    @route("/users/{id}", method="PUT", response=UpdateUserResponse)
    class UpdateUser(msgspec.Struct):
        id: int
        name: str
"""

from __future__ import annotations

from enum import Enum
from string import Formatter
from typing import Any, Callable, Protocol, TypeVar, runtime_checkable
from urllib.parse import quote

from .errors import UnsupportedMethodError

T = TypeVar("T")
ResponseT_co = TypeVar("ResponseT_co", covariant=True)

_UNSET: Any = object()


class HttpMethod(str, Enum):
    """HTTP verbs understood by the client."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"

    @classmethod
    def parse(cls, value: HttpMethod | str) -> HttpMethod:
        """Normalize a verb name, rejecting anything outside the supported set."""
        if isinstance(value, HttpMethod):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise UnsupportedMethodError(str(value)) from None

    @property
    def has_body(self) -> bool:
        """Whether requests with this verb carry a serialized body."""
        return self in (HttpMethod.POST, HttpMethod.PUT, HttpMethod.PATCH)


@runtime_checkable
class ServiceRequest(Protocol[ResponseT_co]):
    """Anything that can be dispatched by the client.

    Implementations declare their response DTO with a ``Response`` class
    attribute and may define ``method()`` to override the default POST.
    """

    def path(self) -> str: ...


def request_path(request: ServiceRequest[Any]) -> str:
    return request.path()


def request_method(request: ServiceRequest[Any]) -> HttpMethod:
    """The verb the DTO asks for, POST if it does not say."""
    method = getattr(request, "method", None)
    if callable(method):
        return HttpMethod.parse(method())
    return HttpMethod.POST


def response_type(request: ServiceRequest[Any]) -> Any:
    """The declared response type; undeclared DTOs decode into plain JSON values."""
    return getattr(type(request), "Response", Any)


def _expand(template: str, fields: list[str], request: Any) -> str:
    url = template
    for name in fields:
        value = getattr(request, name)
        url = url.replace(f"{{{name}}}", quote(str(value), safe=""))
    return url


def route(
    path: str,
    method: HttpMethod | str | None = None,
    response: Any = _UNSET,
) -> Callable[[type[T]], type[T]]:
    """Class decorator implementing the request DTO conventions from a template.

    Placeholders in ``path`` are filled from attributes of the same name and
    URL-quoted.
    """
    fields = [name for _, name, _, _ in Formatter().parse(path) if name]
    verb = HttpMethod.parse(method) if method is not None else None

    def decorate(cls: type[T]) -> type[T]:
        def _path(self: Any) -> str:
            return _expand(path, fields, self)

        cls.path = _path  # type: ignore[attr-defined]
        if verb is not None:

            def _method(self: Any) -> HttpMethod:
                return verb

            cls.method = _method  # type: ignore[attr-defined]
        if response is not _UNSET:
            cls.Response = response  # type: ignore[attr-defined]
        return cls

    return decorate


__all__ = [
    "HttpMethod",
    "ServiceRequest",
    "request_method",
    "request_path",
    "response_type",
    "route",
]
