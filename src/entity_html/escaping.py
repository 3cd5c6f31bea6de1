from __future__ import annotations

import html
from typing import Iterable, Optional

from .annotations import (
    Blockquote,
    Bold,
    Code,
    Italic,
    Pre,
    Spoiler,
    Strikethrough,
    Underline,
)
from .config import RendererConfig
from .spans import AutoLink, Link, MentionLink, SpanKind, UserLink

_FIXED_TAGS: dict[type, tuple[str, str]] = {
    Bold: ("<strong>", "</strong>"),
    Italic: ("<em>", "</em>"),
    Underline: ("<u>", "</u>"),
    Strikethrough: ("<s>", "</s>"),
    Spoiler: ('<span class="spoiler">', "</span>"),
    Code: ("<code>", "</code>"),
}


def escape_html(text: str) -> str:
    if not text:
        return ""
    return html.escape(text, quote=True)


def open_tag(kind: SpanKind) -> str:
    fixed = _FIXED_TAGS.get(type(kind))
    if fixed is not None:
        return fixed[0]
    if isinstance(kind, Pre):
        if kind.language:
            return f'<pre><code class="language-{escape_html(kind.language)}">'
        return "<pre><code>"
    if isinstance(kind, Blockquote):
        if kind.collapsed:
            return '<blockquote class="expandable">'
        return "<blockquote>"
    if isinstance(kind, (Link, UserLink, AutoLink, MentionLink)):
        return f'<a href="{escape_html(kind.href)}">'
    raise TypeError(f"no tag for span kind {type(kind).__name__}")


def close_tag(kind: SpanKind) -> str:
    fixed = _FIXED_TAGS.get(type(kind))
    if fixed is not None:
        return fixed[1]
    if isinstance(kind, Pre):
        return "</code></pre>"
    if isinstance(kind, Blockquote):
        return "</blockquote>"
    if isinstance(kind, (Link, UserLink, AutoLink, MentionLink)):
        return "</a>"
    raise TypeError(f"no tag for span kind {type(kind).__name__}")


def render_segment(
    segment: str,
    open_kinds: Iterable[SpanKind],
    config: Optional[RendererConfig] = None,
) -> str:
    """Escape a text segment for the context formed by ``open_kinds``.

    Pre takes precedence over Blockquote: inside a code block newlines are
    kept as-is.
    """
    config = config or RendererConfig()
    in_pre = False
    in_blockquote = False
    for kind in open_kinds:
        if isinstance(kind, Pre):
            in_pre = True
        elif isinstance(kind, Blockquote):
            in_blockquote = True
    if in_pre:
        return escape_html(segment) if config.escape_pre else segment
    escaped = escape_html(segment)
    if in_blockquote:
        escaped = escaped.replace("\n", config.line_break)
    return escaped


__all__ = ["close_tag", "escape_html", "open_tag", "render_segment"]
