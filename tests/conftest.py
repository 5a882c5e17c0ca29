"""
Pytest configuration and fixtures.
Provides a fake rate API client, a wired container and a test HTTP client.
"""

import os

# Must be set before fxwidget settings are imported
os.environ.setdefault("SCHEDULER_ENABLED", "false")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from datetime import datetime, timezone

import pytest
from dependency_injector import providers
from httpx import ASGITransport, AsyncClient

from fxwidget.deps.di_container import create_container, set_container
from fxwidget.main import app
from fxwidget.services.rate_fetcher_service import RateFetcherService


# 03:05 UTC is 12:05 in Asia/Seoul
FIXED_NOW = datetime(2026, 10, 17, 3, 5, tzinfo=timezone.utc)

SAMPLE_RATES = {
    "USD": 1,
    "KRW": 1300,
    "JPY": 150,
    "EUR": 0.9,
    "CNY": 7.2,
    "GBP": 0.79,
}


def success_payload(rates=None) -> dict:
    """Body shaped like a successful public API response."""
    return {
        "result": "success",
        "base_code": "USD",
        "rates": dict(SAMPLE_RATES if rates is None else rates),
    }


class FakeHttpClient:
    """Stand-in for HttpClient that replays queued responses or exceptions."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []
        self.closed = False

    def queue(self, *responses) -> None:
        self.responses.extend(responses)

    async def get(self, endpoint, params=None, headers=None):
        self.calls.append(endpoint)
        if not self.responses:
            raise AssertionError("No fake response queued")
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_http_client():
    """Fake client with no responses queued."""
    return FakeHttpClient()


@pytest.fixture
def rate_fetcher(fake_http_client):
    """Fetcher bound to the fake client and a fixed clock."""
    return RateFetcherService(
        fake_http_client,
        api_url="https://rates.test/v6/latest/USD",
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def container(fake_http_client):
    """
    Global container with the HTTP client replaced by the fake.
    """
    container = create_container()
    container.http_client.override(providers.Object(fake_http_client))
    set_container(container)
    yield container
    container.widget_service().close()
    container.http_client.reset_override()
    set_container(None)


@pytest.fixture
async def test_client(container):
    """
    Create a test HTTP client.
    """
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
