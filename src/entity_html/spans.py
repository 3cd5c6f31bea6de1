"""Span classification and validation.

Turns raw annotations (UTF-16 offsets, protocol kinds) into code-point
indexed ``Span`` records. Invalid annotations are dropped, never clamped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from .annotations import (
    Blockquote,
    Bold,
    Code,
    CustomEmoji,
    Italic,
    Mention,
    Pre,
    RawAnnotation,
    Spoiler,
    Strikethrough,
    TextLink,
    TextMention,
    Underline,
    Unsupported,
    Url,
)
from .logging_utils import log_event

logger = logging.getLogger("entity_html.spans")

_TRAILING_BLANKS = (" ", "\t")


@dataclass(frozen=True)
class Link:
    href: str


@dataclass(frozen=True)
class UserLink:
    user_id: int

    @property
    def href(self) -> str:
        return f"tg://user?id={self.user_id}"


@dataclass(frozen=True)
class AutoLink:
    href: str


@dataclass(frozen=True)
class MentionLink:
    username: str

    @property
    def href(self) -> str:
        return f"https://t.me/{self.username}"


SpanKind = Union[
    Bold,
    Italic,
    Underline,
    Strikethrough,
    Spoiler,
    Code,
    Pre,
    Blockquote,
    Link,
    UserLink,
    AutoLink,
    MentionLink,
]


@dataclass(frozen=True)
class Span:
    start: int
    length: int
    kind: SpanKind
    id: int

    @property
    def end(self) -> int:
        return self.start + self.length


class Utf16Index:
    """Maps UTF-16 code-unit offsets onto code-point indices of ``text``.

    Offsets that land inside a surrogate pair have no code-point index.
    """

    def __init__(self, text: str) -> None:
        positions: dict[int, int] = {}
        offset = 0
        for index, char in enumerate(text):
            positions[offset] = index
            offset += 2 if ord(char) > 0xFFFF else 1
        positions[offset] = len(text)
        self._positions = positions
        self.code_units = offset

    def to_index(self, offset: int) -> Optional[int]:
        return self._positions.get(offset)


def is_block_kind(kind: SpanKind) -> bool:
    return isinstance(kind, (Pre, Blockquote))


def _resolve_kind(
    annotation: RawAnnotation, covered: str
) -> Union[SpanKind, str]:
    # A str return value is the reason the annotation is dropped.
    kind = annotation.kind
    if isinstance(
        kind,
        (Bold, Italic, Underline, Strikethrough, Spoiler, Code, Pre, Blockquote),
    ):
        return kind
    if isinstance(kind, TextLink):
        return Link(href=kind.url)
    if isinstance(kind, TextMention):
        return UserLink(user_id=kind.user_id)
    if isinstance(kind, Url):
        return AutoLink(href=covered)
    if isinstance(kind, Mention):
        username = covered[1:] if covered.startswith("@") else covered
        return MentionLink(username=username)
    if isinstance(kind, CustomEmoji):
        return "ignored"
    if isinstance(kind, Unsupported):
        return "unsupported"
    return "unknown_kind"


def _trim_trailing_blanks(text: str, start: int, length: int) -> int:
    while length > 0 and text[start + length - 1] in _TRAILING_BLANKS:
        length -= 1
    return length


def classify(
    annotation: RawAnnotation,
    span_id: int,
    text: str,
    index: Utf16Index,
) -> tuple[Optional[Span], Optional[str]]:
    """Return ``(span, None)`` for a usable annotation or ``(None, reason)``."""
    if annotation.offset < 0 or annotation.length < 0:
        return None, "negative_range"
    start = index.to_index(annotation.offset)
    end = index.to_index(annotation.offset + annotation.length)
    if start is None or end is None:
        if annotation.offset + annotation.length > index.code_units:
            return None, "out_of_bounds"
        return None, "splits_code_point"

    length = end - start
    if not is_block_kind(annotation.kind):
        length = _trim_trailing_blanks(text, start, length)
    if length <= 0:
        return None, "empty"

    kind = _resolve_kind(annotation, text[start : start + length])
    if isinstance(kind, str):
        return None, kind
    return Span(start=start, length=length, kind=kind, id=span_id), None


def classify_annotations(
    text: str, annotations: Iterable[RawAnnotation]
) -> list[Span]:
    index = Utf16Index(text)
    spans: list[Span] = []
    for span_id, annotation in enumerate(annotations):
        span, reason = classify(annotation, span_id, text, index)
        if span is None:
            log_event(
                logger,
                logging.DEBUG,
                "entity_html.span.dropped",
                id=span_id,
                reason=reason,
                kind=type(annotation.kind).__name__,
                offset=annotation.offset,
                length=annotation.length,
            )
            continue
        spans.append(span)
    return spans


__all__ = [
    "AutoLink",
    "Link",
    "MentionLink",
    "Span",
    "SpanKind",
    "UserLink",
    "Utf16Index",
    "classify",
    "classify_annotations",
    "is_block_kind",
]
