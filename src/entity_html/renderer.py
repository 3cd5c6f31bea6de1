"""Sweep-line renderer turning text plus entities into nested HTML.

Events are walked left to right while a stack of open span ids mirrors the
tags currently open in the output. When a span ends underneath spans that
are still open (crossing ranges), everything above it is closed and the
spans that have not finished yet are reopened right away, so the output
never contains crossing tags.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import AbstractSet, Iterable, Optional, Sequence

from .annotations import RawAnnotation
from .config import RendererConfig
from .escaping import close_tag, open_tag, render_segment
from .events import build_events, endings_by_position
from .logging_utils import log_event
from .spans import Span, classify_annotations

logger = logging.getLogger("entity_html.renderer")


@dataclass(frozen=True)
class Unwound:
    """Outcome of closing one span that may sit below other open spans."""

    # Ids in the order their closing tags are written (top of stack first).
    closed: tuple[int, ...]
    # Ids whose opening tags are written again, in this order.
    reopened: tuple[int, ...]
    stack: tuple[int, ...]


def unwind(
    stack: Sequence[int], span_id: int, ending_here: AbstractSet[int]
) -> Optional[Unwound]:
    """Close ``span_id`` and every span opened after it.

    Spans other than ``span_id`` that do not also end at the current position
    are reopened on top of the remaining stack. Returns ``None`` when
    ``span_id`` is not open.
    """
    try:
        position = list(stack).index(span_id)
    except ValueError:
        return None
    closed = tuple(reversed(stack[position:]))
    reopened = tuple(
        other for other in closed if other != span_id and other not in ending_here
    )
    return Unwound(
        closed=closed,
        reopened=reopened,
        stack=tuple(stack[:position]) + reopened,
    )


def render_spans(
    text: str, spans: Sequence[Span], config: Optional[RendererConfig] = None
) -> str:
    config = config or RendererConfig()
    if not spans:
        return render_segment(text, (), config)

    arena = {span.id: span for span in spans}
    events = build_events(spans)
    closing = endings_by_position(events)

    parts: list[str] = []
    stack: list[int] = []
    closed: set[int] = set()
    cursor = 0
    reopen_count = 0

    def flush(until: int) -> None:
        nonlocal cursor
        if until <= cursor:
            return
        open_kinds = [arena[span_id].kind for span_id in stack]
        parts.append(render_segment(text[cursor:until], open_kinds, config))
        cursor = until

    for event in events:
        flush(event.position)
        span = arena[event.span_id]
        if event.is_start:
            parts.append(open_tag(span.kind))
            stack.append(span.id)
            continue
        if span.id in closed:
            continue
        result = unwind(stack, span.id, closing.get(event.position, frozenset()))
        if result is None:
            continue
        parts.extend(close_tag(arena[span_id].kind) for span_id in result.closed)
        closed.update(result.closed)
        parts.extend(open_tag(arena[span_id].kind) for span_id in result.reopened)
        closed.difference_update(result.reopened)
        reopen_count += len(result.reopened)
        stack = list(result.stack)

    flush(len(text))
    if reopen_count:
        log_event(
            logger,
            logging.DEBUG,
            "entity_html.render.split_spans",
            spans=len(spans),
            reopened=reopen_count,
        )
    return "".join(parts)


def render(
    text: str,
    annotations: Iterable[RawAnnotation],
    *,
    config: Optional[RendererConfig] = None,
) -> str:
    """Render ``text`` with its formatting annotations as HTML.

    Never raises for bad annotations: out-of-range, empty and unsupported
    ones are dropped and the text under them renders unstyled.
    """
    if not text:
        return ""
    return render_spans(text, classify_annotations(text, annotations), config)


__all__ = ["Unwound", "render", "render_spans", "unwind"]
