"""Entry point for `python -m kube_event_exporter`.

Usage:
    python -m kube_event_exporter --listen-address :8080
"""

from __future__ import annotations

from kube_event_exporter.cli import cli

cli()
