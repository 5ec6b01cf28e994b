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

"""Client configuration.

Configuration can be built directly, read from ``SERVICESTACK_*`` environment
variables, or loaded from a YAML/JSON file:

    base_url: https://api.example.com
    timeout: 60
    headers:
      X-Tenant: acme
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

import msgspec
import yaml
from msgspec import Struct

DEFAULT_TIMEOUT = 30.0
ENV_PREFIX = "SERVICESTACK_"


class ClientConfig(Struct, kw_only=True):
    """Settings used to construct a service client.

    Attributes:
        base_url: Root URL of the service, e.g. "https://api.example.com"
        timeout: Request timeout in seconds
        headers: Extra headers sent with every request
        bearer_token: Initial bearer token, if any
    """

    base_url: str
    timeout: float = DEFAULT_TIMEOUT
    headers: dict[str, str] = {}
    bearer_token: str | None = None

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        prefix: str = ENV_PREFIX,
    ) -> ClientConfig:
        """Read configuration from environment variables.

        Recognized variables (with the default prefix): SERVICESTACK_BASE_URL
        (required), SERVICESTACK_TIMEOUT and SERVICESTACK_BEARER_TOKEN.

        Raises:
            ValueError: If the base URL is missing or the timeout is not a number
        """
        env = os.environ if environ is None else environ

        base_url = env.get(f"{prefix}BASE_URL")
        if not base_url:
            raise ValueError(f"{prefix}BASE_URL is not set")

        timeout = DEFAULT_TIMEOUT
        raw_timeout = env.get(f"{prefix}TIMEOUT")
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                raise ValueError(
                    f"{prefix}TIMEOUT must be a number, got {raw_timeout!r}"
                ) from None

        return cls(
            base_url=base_url,
            timeout=timeout,
            bearer_token=env.get(f"{prefix}BEARER_TOKEN") or None,
        )

    @classmethod
    def load(cls, path: str | Path) -> ClientConfig:
        """Load configuration from a YAML or JSON file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            msgspec.ValidationError: If the file content has the wrong shape
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = yaml.safe_load(f)
        return msgspec.convert(data or {}, cls)


__all__ = ["ClientConfig", "DEFAULT_TIMEOUT", "ENV_PREFIX"]
