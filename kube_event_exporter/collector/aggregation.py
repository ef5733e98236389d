"""Reduction of event records into per-key totals."""

from __future__ import annotations

from collections.abc import Iterable

from kube_event_exporter.models.events import AggregationKey, EventRecord


def aggregate(records: Iterable[EventRecord]) -> dict[AggregationKey, int]:
    """Sum event counts by ``(reason, type, involved_object_kind)``.

    Returns a fresh table on every call. A record with ``count == 0`` still
    creates an entry for its key. The result does not depend on input order.
    """
    table: dict[AggregationKey, int] = {}
    for record in records:
        key = record.key
        table[key] = table.get(key, 0) + record.count
    return table
