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

"""Tests for SyncJsonServiceClient."""

import json
import threading
from concurrent.futures import ThreadPoolExecutor

import httpx
import pytest

from jsonservice_client import (
    ApiError,
    DeserializationError,
    SyncJsonServiceClient,
    TransportError,
)
from tests.dtos import Hello, HelloResponse, Recorder, Search


def make_client(recorder: Recorder, base_url: str = "https://api.example.com"):
    transport = httpx.Client(transport=httpx.MockTransport(recorder))
    return SyncJsonServiceClient.with_transport(base_url, transport)


class TestSyncJsonServiceClient:
    def test_post(self):
        recorder = Recorder(json={"result": "Hello, World!"})
        with make_client(recorder) as client:
            response = client.post(Hello(name="World"))

        assert response == HelloResponse(result="Hello, World!")
        assert str(recorder.last.url) == "https://api.example.com/hello"
        assert json.loads(recorder.last.content) == {"name": "World"}

    def test_get_has_no_body(self):
        recorder = Recorder(json={"result": "hi"})
        client = make_client(recorder)
        client.get(Hello(name="World"))
        assert recorder.last.method == "GET"
        assert recorder.last.content == b""

    def test_send_and_verb_override(self):
        recorder = Recorder(json={"results": []})
        client = make_client(recorder)
        client.send(Search(query="q"))
        client.post(Search(query="q"))
        assert [r.method for r in recorder.requests] == ["PATCH", "POST"]

    def test_context_manager_closes_transport(self):
        recorder = Recorder(json={"result": "hi"})
        with make_client(recorder) as client:
            transport = client.transport
        assert transport.is_closed

    def test_bearer_token(self):
        recorder = Recorder(json={"result": "hi"})
        client = make_client(recorder)
        client.set_bearer_token("sync-token")
        client.put(Hello(name="World"))
        client.clear_bearer_token()
        client.put(Hello(name="World"))
        assert recorder.requests[0].headers["authorization"] == "Bearer sync-token"
        assert "authorization" not in recorder.requests[1].headers

    def test_api_error(self):
        client = make_client(Recorder(status_code=404, content=b"Not Found"))
        with pytest.raises(ApiError) as exc_info:
            client.delete(Hello(name="World"))
        assert exc_info.value.status_code == 404

    def test_deserialization_error(self):
        client = make_client(Recorder(json={"results": "not-a-list"}))
        with pytest.raises(DeserializationError):
            client.send(Search(query="q"))

    def test_transport_error(self):
        client = make_client(Recorder(error=httpx.ConnectError("refused")))
        with pytest.raises(TransportError):
            client.post(Hello(name="World"))

    def test_raw_request(self):
        recorder = Recorder(json={"result": "raw"})
        client = make_client(recorder)
        response = client.request(
            "PATCH", "/hello", {"name": "x"}, response_type=HelloResponse
        )
        assert response.result == "raw"
        assert recorder.last.method == "PATCH"

    def test_send_detailed(self):
        recorder = Recorder(status_code=202, json={"result": "queued"})
        client = make_client(recorder)
        detailed = client.send_detailed(Hello(name="World"), method="PUT")
        assert detailed.status_code == 202
        assert detailed.parsed.result == "queued"
        assert recorder.last.method == "PUT"

    def test_threads_with_token_changes_never_torn(self):
        lock = threading.Lock()
        seen: list[str | None] = []

        def handler(request: httpx.Request) -> httpx.Response:
            with lock:
                seen.append(request.headers.get("authorization"))
            return httpx.Response(200, json={"result": "ok"})

        client = SyncJsonServiceClient.with_transport(
            "https://api.example.com",
            httpx.Client(transport=httpx.MockTransport(handler)),
        )
        old = "old-" + "a" * 128
        new = "new-" + "b" * 128
        client.set_bearer_token(old)

        def flip():
            for i in range(200):
                client.set_bearer_token(new if i % 2 == 0 else old)

        with ThreadPoolExecutor(max_workers=8) as pool:
            futures = [pool.submit(flip)]
            futures += [
                pool.submit(client.post, Hello(name=str(i))) for i in range(100)
            ]
            for future in futures:
                future.result()

        assert len(seen) == 100
        assert set(seen) <= {f"Bearer {old}", f"Bearer {new}"}
