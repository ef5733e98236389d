"""HTTP routes: the scrape endpoint and a liveness check."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Request, Response
from fastapi.responses import PlainTextResponse
from prometheus_client.exposition import choose_encoder

from kube_event_exporter.api.schemas import HealthResponse
from kube_event_exporter.errors import ScrapeError

_log = structlog.get_logger(component="api.routes")

router = APIRouter()


@router.get("/metrics")
def metrics(request: Request) -> Response:
    """Render every collector in the app's registry.

    Declared sync so Starlette runs it in the worker thread pool; collectors
    block on the event fetch. A failed fetch returns 503 with no samples.
    """
    registry = request.app.state.registry
    encoder, content_type = choose_encoder(request.headers.get("accept", ""))
    try:
        body = encoder(registry)
    except ScrapeError as exc:
        _log.warning("scrape_failed", error=str(exc))
        return PlainTextResponse(f"scrape failed: {exc}\n", status_code=503)
    return Response(content=body, media_type=content_type)


@router.get("/healthz", response_model=HealthResponse)
async def healthz() -> HealthResponse:
    from kube_event_exporter import __version__

    return HealthResponse(version=__version__)
