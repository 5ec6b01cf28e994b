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

"""Tests for client configuration."""

import msgspec
import pytest

from jsonservice_client import ClientConfig


class TestClientConfig:
    def test_defaults(self):
        config = ClientConfig(base_url="https://api.example.com")
        assert config.timeout == 30.0
        assert config.headers == {}
        assert config.bearer_token is None

    def test_from_env(self):
        config = ClientConfig.from_env(
            {
                "SERVICESTACK_BASE_URL": "https://api.example.com",
                "SERVICESTACK_TIMEOUT": "12.5",
                "SERVICESTACK_BEARER_TOKEN": "env-token",
            }
        )
        assert config.base_url == "https://api.example.com"
        assert config.timeout == 12.5
        assert config.bearer_token == "env-token"

    def test_from_env_custom_prefix(self):
        config = ClientConfig.from_env({"MYAPI_BASE_URL": "http://x"}, prefix="MYAPI_")
        assert config.base_url == "http://x"
        assert config.timeout == 30.0

    def test_from_env_missing_base_url(self):
        with pytest.raises(ValueError, match="SERVICESTACK_BASE_URL"):
            ClientConfig.from_env({})

    def test_from_env_bad_timeout(self):
        with pytest.raises(ValueError, match="must be a number"):
            ClientConfig.from_env(
                {"SERVICESTACK_BASE_URL": "http://x", "SERVICESTACK_TIMEOUT": "soon"}
            )

    def test_from_os_environ(self, monkeypatch):
        monkeypatch.setenv("SERVICESTACK_BASE_URL", "https://env.example.com")
        monkeypatch.delenv("SERVICESTACK_TIMEOUT", raising=False)
        monkeypatch.delenv("SERVICESTACK_BEARER_TOKEN", raising=False)
        config = ClientConfig.from_env()
        assert config.base_url == "https://env.example.com"
        assert config.bearer_token is None

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "client.yaml"
        path.write_text(
            "base_url: https://api.example.com\n"
            "timeout: 60\n"
            "headers:\n"
            "  X-Tenant: acme\n"
        )
        config = ClientConfig.load(path)
        assert config.timeout == 60.0
        assert config.headers == {"X-Tenant": "acme"}

    def test_load_json(self, tmp_path):
        path = tmp_path / "client.json"
        path.write_text('{"base_url": "https://api.example.com", "bearer_token": "t"}')
        config = ClientConfig.load(str(path))
        assert config.bearer_token == "t"

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ClientConfig.load(tmp_path / "missing.yaml")

    def test_load_wrong_shape(self, tmp_path):
        path = tmp_path / "client.yaml"
        path.write_text("timeout: 5\n")
        with pytest.raises(msgspec.ValidationError):
            ClientConfig.load(path)
