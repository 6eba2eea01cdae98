import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

import pytest  # noqa: E402

from portfolio.config import settings  # noqa: E402
from portfolio.utils.media_paths import MediaNamespace  # noqa: E402

BLOB_BASE = "https://store123.public.blob.vercel-storage.com"


@pytest.fixture(scope="module")
def anyio_backend():
    # Limit tests to asyncio backend so local runs do not require the Trio extra.
    return "asyncio"


@pytest.fixture
def namespace() -> MediaNamespace:
    return MediaNamespace(base_url=BLOB_BASE, prefix="web-pics")


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch, tmp_path):
    """Keep tests off real credentials and out of the working directory."""
    monkeypatch.setattr(settings, "upstash_redis_rest_url", None, raising=False)
    monkeypatch.setattr(settings, "upstash_redis_rest_token", None, raising=False)
    monkeypatch.setattr(settings, "blob_read_write_token", None, raising=False)
    monkeypatch.setattr(settings, "blob_base_url", BLOB_BASE, raising=False)
    monkeypatch.setattr(settings, "blob_prefix", "web-pics", raising=False)
    monkeypatch.setattr(
        settings, "data_cache_path", str(tmp_path / "data-cache.json"), raising=False
    )
    yield


@pytest.fixture
def portfolio_service(tmp_path, namespace):
    from portfolio.services.data_cache import DataCache
    from portfolio.services.portfolio_data import PortfolioDataService

    from .utils import FakeBlobStorage, FakeKVStore

    return PortfolioDataService(
        kv=FakeKVStore(),
        blob_storage=FakeBlobStorage(),
        cache=DataCache(tmp_path / "cache.json"),
        namespace=namespace,
    )


@pytest.fixture
async def async_client(portfolio_service):
    from httpx import ASGITransport, AsyncClient

    from portfolio.main import app
    from portfolio.routes.data import get_portfolio_service

    app.dependency_overrides[get_portfolio_service] = lambda: portfolio_service
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            yield client
    finally:
        app.dependency_overrides.clear()
        await portfolio_service.drain()
