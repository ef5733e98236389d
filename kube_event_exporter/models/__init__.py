"""Core data structures for kube-event-exporter."""

from kube_event_exporter.models.config import ExporterConfig
from kube_event_exporter.models.events import AggregationKey, EventRecord

__all__ = [
    "AggregationKey",
    "EventRecord",
    "ExporterConfig",
]
