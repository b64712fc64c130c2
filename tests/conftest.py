"""Shared fixtures for the PLEIADES API client test suite."""

import json
from unittest.mock import MagicMock

import httpx
import pytest

from pleiades.client.api import Client
from pleiades.client.models import ClientConfig
from pleiades.config.settings import get_settings

API = "https://api.example.test"
IAM = "https://iam.example.test/realms/pleiades/protocol/openid-connect"


@pytest.fixture
def client_config() -> ClientConfig:
    """A typical client config for testing."""
    return ClientConfig(
        client_id="pleiades-app",
        client_secret="s3cr3t",
        user_name="alice",
        user_password="pa55",
        iam_token_endpoint=IAM,
        api_endpoint=API,
    )


@pytest.fixture
def sample_record() -> dict:
    return {"class": "Actions.Action", "content": {"name": "inspect", "x": 1}}


@pytest.fixture
def make_client(client_config):
    """Factory fixture: build a Client whose HTTP traffic goes to `handler`.

    Usage:
        client, sent = make_client(lambda request: httpx.Response(200, text="ok"))

    `sent` collects every request the client issued, in order.
    """
    clients: list[Client] = []

    def _make(handler, config: ClientConfig | None = None, **kwargs):
        sent: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            sent.append(request)
            return handler(request)

        client = Client(
            config or client_config,
            transport=httpx.MockTransport(_record),
            s3_client=MagicMock(),
            **kwargs,
        )
        clients.append(client)
        return client, sent

    yield _make

    for client in clients:
        client.close()


@pytest.fixture
def override_settings(monkeypatch):
    """Factory fixture: set PLEIADES_* env vars and clear settings cache.

    Usage:
        override_settings(API_ENDPOINT="https://api", LOG_LEVEL="DEBUG")
    """
    def _override(**kwargs):
        for key, value in kwargs.items():
            monkeypatch.setenv(f"PLEIADES_{key.upper()}", str(value))
        get_settings.cache_clear()

    yield _override

    get_settings.cache_clear()


def json_body(request: httpx.Request):
    """Decode the JSON body a client sent."""
    return json.loads(request.content)
