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

"""Typed HTTP client for ServiceStack-style JSON services.

Example:
    ```python
    from typing import ClassVar

    import msgspec

    from jsonservice_client import JsonServiceClient


    class HelloResponse(msgspec.Struct):
        result: str


    class Hello(msgspec.Struct):
        Response: ClassVar[type] = HelloResponse

        name: str

        def path(self) -> str:
            return "/hello"


    async with JsonServiceClient("https://api.example.com") as client:
        response = await client.post(Hello(name="World"))
        print(response.result)
    ```
"""

from .client import JsonServiceClient, SyncJsonServiceClient
from .config import ClientConfig
from .dto import HttpMethod, ServiceRequest, route
from .errors import (
    ApiError,
    DeserializationError,
    ResponseError,
    ResponseStatus,
    SerializationError,
    ServiceClientError,
    TransportError,
    UnsupportedMethodError,
)
from .types import DetailedResponse

__version__ = "0.1.0"

__all__ = [
    # Clients
    "JsonServiceClient",
    "SyncJsonServiceClient",
    "ClientConfig",
    # Request DTOs
    "HttpMethod",
    "ServiceRequest",
    "route",
    # Results
    "DetailedResponse",
    # Errors
    "ApiError",
    "DeserializationError",
    "ResponseError",
    "ResponseStatus",
    "SerializationError",
    "ServiceClientError",
    "TransportError",
    "UnsupportedMethodError",
]
