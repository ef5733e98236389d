"""kube-event-exporter: Prometheus exporter for aggregated Kubernetes event counts."""

__version__ = "0.1.0"
