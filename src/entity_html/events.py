from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .spans import Span


@dataclass(frozen=True)
class TagEvent:
    position: int
    is_start: bool
    span_id: int
    span_length: int


def _sort_key(event: TagEvent) -> tuple[int, int, int]:
    # Starts before ends; longer spans open first and close last.
    if event.is_start:
        return (event.position, 0, -event.span_length)
    return (event.position, 1, event.span_length)


def build_events(spans: Iterable[Span]) -> list[TagEvent]:
    """Return start/end events for ``spans`` in rendering order.

    ``sorted`` is stable, so spans tied on every key keep input order.
    """
    events: list[TagEvent] = []
    for span in spans:
        events.append(TagEvent(span.start, True, span.id, span.length))
        events.append(TagEvent(span.end, False, span.id, span.length))
    return sorted(events, key=_sort_key)


def endings_by_position(events: Iterable[TagEvent]) -> dict[int, set[int]]:
    closing: dict[int, set[int]] = {}
    for event in events:
        if not event.is_start:
            closing.setdefault(event.position, set()).add(event.span_id)
    return closing


__all__ = ["TagEvent", "build_events", "endings_by_position"]
