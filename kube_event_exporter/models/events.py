"""Core event data structures."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NamedTuple


class AggregationKey(NamedTuple):
    """Composite key events are aggregated under."""

    reason: str
    type: str
    involved_object_kind: str


@dataclass(frozen=True)
class EventRecord:
    """Canonical event representation.

    Produced by an EventLister, consumed by the collector. Records sharing
    a key are not deduplicated by the source; each contributes its own count.
    """

    reason: str
    type: str
    involved_object_kind: str
    count: int = 0

    @property
    def key(self) -> AggregationKey:
        return AggregationKey(self.reason, self.type, self.involved_object_kind)

    @classmethod
    def from_v1_event(cls, event: Any) -> EventRecord:
        """Build a record from a kubernetes-asyncio ``V1Event``.

        Missing strings become ``""`` and a missing count becomes 0.
        """
        involved = getattr(event, "involved_object", None)
        count = getattr(event, "count", None) or 0
        return cls(
            reason=getattr(event, "reason", None) or "",
            type=getattr(event, "type", None) or "",
            involved_object_kind=getattr(involved, "kind", None) or "",
            count=max(int(count), 0),
        )
