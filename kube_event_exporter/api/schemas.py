"""Pydantic response models for the exporter's HTTP API."""

from __future__ import annotations

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Body of ``GET /healthz``."""

    status: str = "ok"
    version: str


class ErrorResponse(BaseModel):
    """Error envelope for non-scrape failures."""

    error: str
    detail: str
