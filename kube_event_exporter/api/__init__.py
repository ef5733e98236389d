"""HTTP layer for kube-event-exporter.

Exposes:
    create_app -- FastAPI application factory serving /metrics and /healthz.
"""

from kube_event_exporter.api.app import create_app

__all__ = ["create_app"]
