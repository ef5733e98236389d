"""FastAPI application factory for kube-event-exporter.

Usage::

    from prometheus_client import CollectorRegistry

    from kube_event_exporter.api.app import create_app

    registry = CollectorRegistry()
    registry.register(collector)
    app = create_app(registry=registry)

The registry is passed in explicitly; nothing registers into
prometheus_client's global default registry.
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import CollectorRegistry

from kube_event_exporter.api.routes import router
from kube_event_exporter.api.schemas import ErrorResponse

_log = structlog.get_logger(component="api.app")


def create_app(registry: CollectorRegistry) -> FastAPI:
    """Create and configure the exporter's FastAPI application.

    Args:
        registry: Registry whose collectors are rendered on ``/metrics``.

    Returns:
        Configured FastAPI application, ready to be served by uvicorn.
    """
    from kube_event_exporter import __version__

    app = FastAPI(
        title="kube-event-exporter",
        summary="Prometheus exporter for aggregated Kubernetes event counts",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    app.state.registry = registry

    app.include_router(router)

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Catch-all for unhandled exceptions; never expose stack traces."""
        _log.error(
            "unhandled_exception",
            path=str(request.url.path),
            method=request.method,
            error=str(exc),
        )
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="INTERNAL_ERROR",
                detail="An unexpected error occurred.",
            ).model_dump(),
        )

    return app
