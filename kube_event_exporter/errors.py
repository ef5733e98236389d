"""Exception hierarchy for kube-event-exporter."""

from __future__ import annotations


class ExporterError(Exception):
    """Base class for all exporter errors."""


class ListerSetupError(ExporterError):
    """Raised when the Kubernetes API client cannot be established.

    Only raised at startup; the bootstrap treats it as fatal.
    """


class EventListError(ExporterError):
    """Raised when a single event list call fails.

    Args:
        message: Human-readable cause.
        status:  HTTP status returned by the API server, if any.
    """

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class ScrapeError(ExporterError):
    """Raised by the collector when a scrape cannot produce a complete result.

    The HTTP layer maps this to a failed scrape; the process keeps serving.
    """
