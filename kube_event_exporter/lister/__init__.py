"""Event listers for kube-event-exporter.

An EventLister returns the full set of events currently visible cluster-wide.
The collector depends only on this interface; the Kubernetes implementation
lives in ``kube_event_exporter.lister.kubernetes``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from kube_event_exporter.models.events import EventRecord


class EventLister(ABC):
    """Abstract read-only source of event records.

    Implementations must be safe to call concurrently; the collector shares
    one lister across every in-flight scrape.
    """

    @abstractmethod
    async def list_events(self) -> list[EventRecord]:
        """Return every event visible to the configured credential.

        Raises:
            EventListError: the list could not be completed.
        """

    async def close(self) -> None:  # noqa: B027
        """Release any underlying connections."""


__all__ = ["EventLister"]
