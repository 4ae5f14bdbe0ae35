"""
Shared pytest fixtures for moni tests.

Provides a static credential source and HTTP clients backed by
``httpx.MockTransport`` so no test touches the network or google-auth.
"""

import json
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

import httpx
import pytest

from moni.api_clients.base_client import AuthenticatedHttpClient
from moni.api_clients.credential_provider import Credential, CredentialProvider
from moni.config import Config, GoogleCloudConfig


class StaticCredentialSource:
    """Credential source that counts acquisitions and never does I/O."""

    def __init__(self, token: str = "test-token", lifetime_seconds: float = 3600):
        self.token = token
        self.lifetime_seconds = lifetime_seconds
        self.calls: List[tuple] = []

    async def acquire(self, scopes):
        self.calls.append(scopes)
        expiry = datetime.now(timezone.utc) + timedelta(seconds=self.lifetime_seconds)
        return Credential(
            token=f"{self.token}-{len(self.calls)}", scopes=scopes, expiry=expiry
        )


class RecordingHandler:
    """MockTransport handler that records requests and replays queued responses."""

    def __init__(self, responses: Optional[List[httpx.Response]] = None):
        self.responses = list(responses or [])
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            return httpx.Response(500, json={"error": {"message": "no response queued"}})
        return self.responses.pop(0)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self):
        return json.loads(self.last_request.content)


@pytest.fixture
def credential_source() -> StaticCredentialSource:
    return StaticCredentialSource()


@pytest.fixture
def credential_provider(credential_source) -> CredentialProvider:
    return CredentialProvider(source=credential_source)


@pytest.fixture
def recording_handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def make_http_client(credential_provider) -> Callable[..., AuthenticatedHttpClient]:
    """Build an AuthenticatedHttpClient whose transport calls ``handler``."""

    def _make(handler) -> AuthenticatedHttpClient:
        return AuthenticatedHttpClient(
            credential_provider, transport=httpx.MockTransport(handler)
        )

    return _make


@pytest.fixture
def test_config() -> Config:
    return Config(
        google_cloud=GoogleCloudConfig(
            project_id="test-project",
            data_store_id="ds1",
            engine_id="engine1",
        )
    )
