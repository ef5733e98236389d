"""Logging setup for kube-event-exporter."""
