import logging

from fastapi import APIRouter, Depends, Request, Response

from ..config import settings
from ..observability import record_degradation, record_source
from ..schemas import ContentSource
from ..services.data_fallback import default_payload
from ..services.portfolio_data import PortfolioDataService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["data"])


def get_portfolio_service(request: Request) -> PortfolioDataService:
    return request.app.state.portfolio


def _cache_control() -> str:
    return (
        f"public, s-maxage={settings.data_max_age_seconds}, "
        f"stale-while-revalidate={settings.data_stale_while_revalidate_seconds}"
    )


@router.get("/data")
async def portfolio_data(
    response: Response,
    service: PortfolioDataService = Depends(get_portfolio_service),
):
    try:
        resolved = await service.load()
        payload, source = resolved.payload, resolved.source
    except Exception as exc:  # noqa: BLE001 - the public page must always render
        record_degradation(
            "route",
            "data",
            f"Unexpected failure assembling portfolio data: {exc}",
            error=exc,
            level=logging.ERROR,
        )
        record_source(ContentSource.defaults)
        payload, source = default_payload(), ContentSource.defaults

    response.headers["Cache-Control"] = _cache_control()
    response.headers["X-Content-Source"] = source.value
    return payload.to_json()
