from __future__ import annotations

from collections.abc import AsyncIterator, Iterator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from app.config import get_settings
from app.main import create_app
from app.observability.metrics import reset_metrics
from app.services.user_store import UserStore


@pytest.fixture(autouse=True)
def test_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv("DATABASE_URL", "sqlite+pysqlite:///:memory:")
    monkeypatch.setenv("ENABLE_METRICS_ENDPOINT", "true")
    get_settings.cache_clear()
    reset_metrics()

    yield

    reset_metrics()
    get_settings.cache_clear()


@pytest.fixture
def store() -> Iterator[UserStore]:
    # Fresh in-memory database per test; StaticPool keeps it on one connection.
    user_store = UserStore.from_url("sqlite+pysqlite:///:memory:")
    user_store.init_schema()
    yield user_store
    user_store.close()


@pytest.fixture
def fastapi_app(store: UserStore) -> FastAPI:
    return create_app(store=store)


@pytest.fixture
async def api_client(fastapi_app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
