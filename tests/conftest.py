"""Shared fixtures: a throwaway SQLite database per test and fake outbound services."""

from typing import Callable

import httpx
import pytest
from fastapi.testclient import TestClient

from ticketbuddy.config import settings
from ticketbuddy.github.infrastructure import GitHubClient
from ticketbuddy.github.interfaces import get_github_client
from ticketbuddy.main import app
from ticketbuddy.tickets.interfaces import get_llm_client

from tests.fakes import GITHUB_TEST_URL, FakeGitHub, FakeLLM


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Every test gets its own database and no external services."""
    monkeypatch.setattr(settings, "database_url", f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    monkeypatch.setattr(settings, "llm_api_key", None)
    monkeypatch.setattr(settings, "mock_llm", False)
    monkeypatch.setattr(settings, "github_token", None)
    monkeypatch.setattr(settings, "github_webhook_secret", None)
    monkeypatch.setattr(settings, "github_resync_interval", 0)
    monkeypatch.setattr(settings, "checkout_logs_path", tmp_path / "missing-logs.yaml")
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def use_llm() -> Callable[[FakeLLM], FakeLLM]:
    """Route every model call of the app to the given fake."""

    def install(llm: FakeLLM) -> FakeLLM:
        app.dependency_overrides[get_llm_client] = lambda: llm
        return llm

    return install


@pytest.fixture
def github() -> FakeGitHub:
    fake = FakeGitHub()

    async def fake_client():
        async with GitHubClient(
            token="test-token",
            base_url=GITHUB_TEST_URL,
            transport=httpx.MockTransport(fake.handle)
        ) as github_client:
            yield github_client

    app.dependency_overrides[get_github_client] = fake_client
    return fake
