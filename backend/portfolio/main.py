from contextlib import asynccontextmanager

import sentry_sdk
from fastapi import FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .config import settings
from .logging_utils import setup_logging
from .middleware.request_context import RequestContextMiddleware
from .routes import data
from .services.blob_storage import BlobStorageService
from .services.data_cache import DataCache
from .services.kv_store import KVStoreClient
from .services.portfolio_data import PortfolioDataService
from .utils.media_paths import MediaNamespace

setup_logging()

if settings.sentry_dsn:
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        traces_sample_rate=settings.sentry_traces_sample_rate,
        environment=settings.environment,
    )


def build_portfolio_service() -> PortfolioDataService:
    return PortfolioDataService(
        kv=KVStoreClient(),
        blob_storage=BlobStorageService(),
        cache=DataCache(),
        namespace=MediaNamespace.from_settings(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    service = build_portfolio_service()
    app.state.portfolio = service
    try:
        yield
    finally:
        await service.drain()


app = FastAPI(title="Portfolio Content Backend", version="0.1.0", lifespan=lifespan)

app.add_middleware(RequestContextMiddleware)

app.include_router(data.router)


@app.get("/healthz")
async def healthz():
    return {"ok": True, "message": "Backend responding"}


@app.get("/metrics")
def metrics_endpoint():
    payload = generate_latest()
    return Response(content=payload, media_type=CONTENT_TYPE_LATEST)
