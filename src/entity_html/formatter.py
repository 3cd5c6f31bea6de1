"""Message-formatter facade used by reply and notification code.

Callers hand over the text and entity list of an incoming or edited message
and get back HTML tagged with the parse mode the transport should send.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional, Protocol, runtime_checkable

from .annotations import annotations_from_payloads
from .config import RendererConfig
from .renderer import render

HTML_PARSE_MODE = "HTML"


@dataclass(frozen=True)
class RenderedText:
    """Rendered output with the parse mode the transport should use."""

    text: str
    parse_mode: Optional[str] = None


@runtime_checkable
class MessageRenderer(Protocol):
    """Protocol for turning message text plus entities into sendable text."""

    def render_message(
        self, text: Optional[str], entities: Optional[Iterable[Any]] = None
    ) -> RenderedText:
        """Render a message body with its formatting entities."""


class EntityHtmlRenderer:
    def __init__(self, config: Optional[RendererConfig] = None) -> None:
        self._config = config or RendererConfig()

    @property
    def config(self) -> RendererConfig:
        return self._config

    def render_message(
        self, text: Optional[str], entities: Optional[Iterable[Any]] = None
    ) -> RenderedText:
        annotations = annotations_from_payloads(entities)
        html_text = render(text or "", annotations, config=self._config)
        return RenderedText(text=html_text, parse_mode=HTML_PARSE_MODE)


__all__ = [
    "EntityHtmlRenderer",
    "HTML_PARSE_MODE",
    "MessageRenderer",
    "RenderedText",
]
