"""Shared fixtures and fakes for kube-event-exporter tests.

Provides in-memory EventListers so collector, API and app tests can run
without touching a real Kubernetes cluster.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

import pytest
from prometheus_client.parser import text_string_to_metric_families

from kube_event_exporter.errors import EventListError
from kube_event_exporter.lister import EventLister
from kube_event_exporter.models.events import EventRecord

# ---------------------------------------------------------------------------
# Event factory helpers
# ---------------------------------------------------------------------------


def make_event(
    reason: str = "Scheduled",
    type: str = "Normal",
    kind: str = "Pod",
    count: int = 1,
) -> EventRecord:
    """Create an EventRecord with sensible defaults for testing."""
    return EventRecord(reason=reason, type=type, involved_object_kind=kind, count=count)


SCENARIO_EVENTS = [
    make_event("Scheduled", "Normal", "Pod", 2),
    make_event("Scheduled", "Normal", "Pod", 3),
    make_event("Failed", "Warning", "Pod", 1),
]

SCENARIO_COUNTS = {
    ("Scheduled", "Normal", "Pod"): 5.0,
    ("Failed", "Warning", "Pod"): 1.0,
}


# ---------------------------------------------------------------------------
# Exposition helpers
# ---------------------------------------------------------------------------


def parse_event_counts(text: str) -> dict[tuple[str, str, str], float]:
    """Parse Prometheus text exposition into ``(reason, type, kind) -> value``.

    Label order in the exposition is not significant, so tests compare
    parsed samples rather than raw lines.
    """
    counts: dict[tuple[str, str, str], float] = {}
    for family in text_string_to_metric_families(text):
        if family.name != "event_count_total":
            continue
        for sample in family.samples:
            assert set(sample.labels) == {"reason", "type", "involvedObjectKind"}
            key = (sample.labels["reason"], sample.labels["type"], sample.labels["involvedObjectKind"])
            counts[key] = sample.value
    return counts


# ---------------------------------------------------------------------------
# Fake listers
# ---------------------------------------------------------------------------


class StaticLister(EventLister):
    """Returns the same records on every call and counts calls."""

    def __init__(self, records: Sequence[EventRecord] = ()) -> None:
        self.records = list(records)
        self.calls = 0
        self.closed = False

    async def list_events(self) -> list[EventRecord]:
        self.calls += 1
        return list(self.records)

    async def close(self) -> None:
        self.closed = True


class FailingLister(EventLister):
    """Always fails, like an API server rejecting the service account."""

    def __init__(self, status: int | None = 403) -> None:
        self.status = status

    async def list_events(self) -> list[EventRecord]:
        raise EventListError("events is forbidden", status=self.status)


class SlowLister(EventLister):
    """Sleeps before answering; used to trip the collector timeout."""

    def __init__(self, delay: float, records: Sequence[EventRecord] = ()) -> None:
        self.delay = delay
        self.records = list(records)
        self.cancelled = False

    async def list_events(self) -> list[EventRecord]:
        try:
            await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return list(self.records)


@pytest.fixture
def scenario_lister() -> StaticLister:
    return StaticLister(SCENARIO_EVENTS)
