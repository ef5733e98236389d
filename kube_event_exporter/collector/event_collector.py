"""Prometheus collector exposing aggregated Kubernetes event counts.

Every ``collect()`` call performs a fresh full list through the injected
EventLister and reduces it into one gauge sample per
``(reason, type, involvedObjectKind)``. Nothing is cached between scrapes.

prometheus_client calls ``collect()`` synchronously. The lister is async, so
the fetch is either submitted to the event loop that owns the lister's HTTP
session (``loop=``) or, when no loop is given, run on a private loop.
"""

from __future__ import annotations

import asyncio
import math
import time
from collections.abc import Iterator
from dataclasses import dataclass

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.registry import Collector

from kube_event_exporter.collector.aggregation import aggregate
from kube_event_exporter.errors import EventListError, ScrapeError
from kube_event_exporter.lister import EventLister
from kube_event_exporter.models.events import EventRecord
from kube_event_exporter.observability.logging import get_logger

_log = get_logger("collector.event_collector")

_DEFAULT_TIMEOUT = 10.0

EVENT_COUNT_METRIC = "event_count_total"
EVENT_COUNT_HELP = "The total number of events currently reported by kubernetes."
EVENT_COUNT_LABELS = ("reason", "type", "involvedObjectKind")


@dataclass(frozen=True)
class MetricDescriptor:
    """Static declaration of the exported gauge."""

    name: str
    documentation: str
    label_names: tuple[str, ...]

    def family(self) -> GaugeMetricFamily:
        """Return an empty gauge family for this descriptor."""
        return GaugeMetricFamily(self.name, self.documentation, labels=list(self.label_names))


class EventCountCollector(Collector):
    """Aggregates cluster events into the ``event_count_total`` gauge.

    Args:
        lister:  EventLister queried on every scrape.
        timeout: Upper bound in seconds for a single fetch.
        loop:    Event loop the lister must run on. Required when the lister
                 holds loop-bound resources and ``collect()`` is called from
                 another thread.
    """

    def __init__(
        self,
        lister: EventLister,
        *,
        timeout: float = _DEFAULT_TIMEOUT,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        if not math.isfinite(timeout) or timeout <= 0:
            raise ValueError("timeout must be a positive finite number")
        self._lister = lister
        self._timeout = timeout
        self._loop = loop
        self._descriptor = MetricDescriptor(EVENT_COUNT_METRIC, EVENT_COUNT_HELP, EVENT_COUNT_LABELS)

    @property
    def descriptor(self) -> MetricDescriptor:
        return self._descriptor

    def describe(self) -> list[GaugeMetricFamily]:
        return [self._descriptor.family()]

    def collect(self) -> Iterator[GaugeMetricFamily]:
        """Fetch, aggregate and yield one gauge family.

        Raises:
            ScrapeError: the fetch failed or timed out. No samples are yielded.
        """
        started = time.monotonic()
        records = self._fetch()
        table = aggregate(records)

        family = self._descriptor.family()
        for key, total in table.items():
            family.add_metric([key.reason, key.type, key.involved_object_kind], float(total))

        _log.debug(
            "scrape_collected",
            events=len(records),
            series=len(table),
            duration_ms=int((time.monotonic() - started) * 1000),
        )
        yield family

    def _fetch(self) -> list[EventRecord]:
        try:
            if self._loop is None:
                return asyncio.run(self._list_with_timeout())
            if _running_loop() is self._loop:
                raise RuntimeError("collect() must not be called from the lister's event loop thread")
            future = asyncio.run_coroutine_threadsafe(self._list_with_timeout(), self._loop)
            return future.result()
        except EventListError as exc:
            _log.warning("scrape_failed", error=str(exc), status=exc.status)
            raise ScrapeError(f"listing events failed: {exc}") from exc
        except TimeoutError as exc:
            _log.warning("scrape_timed_out", timeout=self._timeout)
            raise ScrapeError(f"listing events timed out after {self._timeout}s") from exc

    async def _list_with_timeout(self) -> list[EventRecord]:
        async with asyncio.timeout(self._timeout):
            return await self._lister.list_events()


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None
