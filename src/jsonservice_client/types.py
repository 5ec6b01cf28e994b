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

"""Result types for detailed dispatch."""

from __future__ import annotations

from collections.abc import Mapping
from http import HTTPStatus
from typing import Generic, TypeVar

from attrs import define

T = TypeVar("T")


@define
class DetailedResponse(Generic[T]):
    """A decoded response together with the HTTP exchange that produced it."""

    status_code: HTTPStatus | int
    content: bytes
    headers: Mapping[str, str]
    parsed: T

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")


__all__ = ["DetailedResponse"]
