"""Collector package for kube-event-exporter.

Turns the cluster's current events into Prometheus samples on every scrape.

Submodules
----------
aggregation     -- aggregate(): pure reduction of records into per-key totals.
event_collector -- EventCountCollector: prometheus_client collector for
                   the ``event_count_total`` gauge.
"""

from kube_event_exporter.collector.aggregation import aggregate
from kube_event_exporter.collector.event_collector import EventCountCollector, MetricDescriptor

__all__ = ["EventCountCollector", "MetricDescriptor", "aggregate"]
