import httpx
import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import create_application


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def make_settings():
    """Build Settings that ignore any local .env file."""

    def _make(**overrides) -> Settings:
        return Settings(_env_file=None, **overrides)

    return _make


@pytest.fixture
def settings(make_settings):
    return make_settings()


@pytest.fixture
def api_app(settings):
    return create_application(settings)


@pytest.fixture
def api_client(api_app):
    with TestClient(api_app) as client:
        yield client


@pytest.fixture
def api_transport(api_app):
    """Route httpx calls straight into the API application."""
    return httpx.ASGITransport(app=api_app)


@pytest.fixture
def unreachable_transport():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    return httpx.MockTransport(handler)
