"""Shared pytest fixtures for MCP Bitbucket tests."""

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from mcp_bitbucket.bitbucket import BitbucketFetcher
from mcp_bitbucket.bitbucket.config import (
    BitbucketConfig,
    BitbucketCredential,
    StandardCredential,
)

CREDENTIAL_ENV_VARS = (
    "ATLASSIAN_SITE_NAME",
    "ATLASSIAN_USER_EMAIL",
    "ATLASSIAN_API_TOKEN",
    "ATLASSIAN_BITBUCKET_USERNAME",
    "ATLASSIAN_BITBUCKET_APP_PASSWORD",
    "ATLASSIAN_BITBUCKET_SSL_VERIFY",
    "ATLASSIAN_BITBUCKET_TIMEOUT",
    "READ_ONLY_MODE",
    "ENABLED_TOOLS",
)


@pytest.fixture(autouse=True)
def clean_bitbucket_env(monkeypatch):
    """Keep credentials from the developer's shell out of every test."""
    for name in CREDENTIAL_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def app_password_config():
    """Configuration using the Bitbucket app password credential."""
    return BitbucketConfig(
        credential=BitbucketCredential(username="bb-user", app_password="app-secret")
    )


@pytest.fixture
def standard_config():
    """Configuration using the Atlassian API token credential."""
    return BitbucketConfig(
        credential=StandardCredential(
            site_name="acme", user_email="dev@acme.com", api_token="api-secret"
        )
    )


class FakeBitbucket:
    """In-memory Bitbucket API served through httpx.MockTransport.

    Routes are keyed by method and URL path; unknown routes answer 404.
    Every request is recorded for later assertions.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], httpx.Response] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        json_body: Any = None,
        status_code: int = 200,
        text: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        if text is not None:
            response = httpx.Response(status_code, text=text, headers=headers)
        elif json_body is not None:
            response = httpx.Response(status_code, json=json_body, headers=headers)
        else:
            response = httpx.Response(status_code, headers=headers)
        self.routes[(method.upper(), path)] = response

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.routes.get((request.method, request.url.path))
        if response is None:
            return httpx.Response(404, json={"error": {"message": "Not found"}})
        return response

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last_request.content)


@pytest.fixture
def fake_bitbucket():
    return FakeBitbucket()


@pytest.fixture
def make_fetcher(app_password_config) -> Callable[..., BitbucketFetcher]:
    """Build a fetcher whose HTTP session talks to a FakeBitbucket."""

    def _make(
        fake: FakeBitbucket, config: BitbucketConfig | None = None
    ) -> BitbucketFetcher:
        fetcher = BitbucketFetcher(config=config or app_password_config)
        fetcher.session.close()
        fetcher.session = fetcher._create_session(
            transport=httpx.MockTransport(fake.handler)
        )
        return fetcher

    return _make


@pytest.fixture
def fetcher(fake_bitbucket, make_fetcher):
    fetcher = make_fetcher(fake_bitbucket)
    yield fetcher
    fetcher.close()
