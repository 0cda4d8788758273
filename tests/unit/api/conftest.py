"""Fixtures for API unit tests: scripted provider, fake adapter, AsyncClient."""

import pytest
from httpx import ASGITransport, AsyncClient

from arcflow.application.reasoning import PlainText
from arcflow.main import app


@pytest.fixture
def provider_scripts():
    """Per-candidate replies. Tests may replace entries before sending a request."""
    return {"gemini-3-flash": [PlainText("INTENT_RECEIVED. Awaiting Authorization.")]}


@pytest.fixture
def app_with_overrides(scripted_provider, provider_scripts, fake_adapter):
    """App with the reasoning provider, settlement adapter and breakers overridden for testing."""
    from arcflow.api import dependencies

    def _provider():
        # Built per request so scripts edited inside a test are picked up.
        app.state.test_provider = scripted_provider(provider_scripts)
        return app.state.test_provider

    app.dependency_overrides[dependencies.get_reasoning_provider] = _provider
    app.dependency_overrides[dependencies.get_execution_adapter] = lambda: fake_adapter
    app.dependency_overrides[dependencies.get_provider_breakers] = lambda: {}
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client(app_with_overrides):
    transport = ASGITransport(app=app_with_overrides)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
