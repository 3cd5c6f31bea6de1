"""Raw formatting annotations and Telegram Bot API payload adapters.

Offsets and lengths in this module are UTF-16 code units, the unit used by
the Telegram protocol. Conversion to code-point indices happens in
``entity_html.spans``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Union

from .coercion import coerce_int
from .logging_utils import log_event

logger = logging.getLogger("entity_html.annotations")


@dataclass(frozen=True)
class Bold:
    pass


@dataclass(frozen=True)
class Italic:
    pass


@dataclass(frozen=True)
class Underline:
    pass


@dataclass(frozen=True)
class Strikethrough:
    pass


@dataclass(frozen=True)
class Spoiler:
    pass


@dataclass(frozen=True)
class Code:
    pass


@dataclass(frozen=True)
class Pre:
    language: Optional[str] = None


@dataclass(frozen=True)
class Blockquote:
    collapsed: bool = False


@dataclass(frozen=True)
class TextLink:
    url: str


@dataclass(frozen=True)
class TextMention:
    user_id: int


@dataclass(frozen=True)
class Url:
    """Bare URL typed in the message; the covered text is the target."""


@dataclass(frozen=True)
class Mention:
    """``@username`` mention; the covered text names the user."""


@dataclass(frozen=True)
class CustomEmoji:
    custom_emoji_id: str = ""


@dataclass(frozen=True)
class Unsupported:
    """Entity type the renderer has no tag for (hashtag, bot_command, ...)."""

    type_name: str


AnnotationKind = Union[
    Bold,
    Italic,
    Underline,
    Strikethrough,
    Spoiler,
    Code,
    Pre,
    Blockquote,
    TextLink,
    TextMention,
    Url,
    Mention,
    CustomEmoji,
    Unsupported,
]


@dataclass(frozen=True)
class RawAnnotation:
    """Formatting annotation as delivered by the messaging layer."""

    offset: int
    length: int
    kind: AnnotationKind


_SIMPLE_KINDS: dict[str, AnnotationKind] = {
    "bold": Bold(),
    "italic": Italic(),
    "underline": Underline(),
    "strikethrough": Strikethrough(),
    "spoiler": Spoiler(),
    "code": Code(),
    "url": Url(),
    "mention": Mention(),
    "blockquote": Blockquote(),
    "expandable_blockquote": Blockquote(collapsed=True),
}


def _field(payload: Any, name: str) -> Any:
    if isinstance(payload, Mapping):
        return payload.get(name)
    return getattr(payload, name, None)


def _kind_from_payload(type_name: str, payload: Any) -> Optional[AnnotationKind]:
    simple = _SIMPLE_KINDS.get(type_name)
    if simple is not None:
        return simple
    if type_name == "pre":
        language = _field(payload, "language")
        if isinstance(language, str) and language:
            return Pre(language=language)
        return Pre()
    if type_name == "text_link":
        url = _field(payload, "url")
        if not isinstance(url, str) or not url:
            return None
        return TextLink(url=url)
    if type_name == "text_mention":
        user = _field(payload, "user")
        user_id = coerce_int(_field(user, "id")) if user is not None else None
        if user_id is None:
            return None
        return TextMention(user_id=user_id)
    if type_name == "custom_emoji":
        emoji_id = _field(payload, "custom_emoji_id")
        return CustomEmoji(custom_emoji_id=str(emoji_id or ""))
    return Unsupported(type_name=type_name)


def annotation_from_payload(payload: Any) -> Optional[RawAnnotation]:
    """Decode one Bot API ``MessageEntity`` (dict or object) into an annotation.

    Returns ``None`` when the payload is missing its type, offset, length or
    the data its type requires (``url`` for ``text_link``, ``user.id`` for
    ``text_mention``).
    """
    if payload is None:
        return None
    type_name = _field(payload, "type")
    if not isinstance(type_name, str) or not type_name:
        return None
    offset = coerce_int(_field(payload, "offset"))
    length = coerce_int(_field(payload, "length"))
    if offset is None or length is None:
        return None
    kind = _kind_from_payload(type_name.strip().lower(), payload)
    if kind is None:
        return None
    return RawAnnotation(offset=offset, length=length, kind=kind)


def annotations_from_payloads(
    payloads: Optional[Iterable[Any]],
) -> list[RawAnnotation]:
    annotations: list[RawAnnotation] = []
    for index, payload in enumerate(payloads or ()):
        if isinstance(payload, RawAnnotation):
            annotations.append(payload)
            continue
        annotation = annotation_from_payload(payload)
        if annotation is None:
            log_event(
                logger,
                logging.DEBUG,
                "entity_html.payload.skipped",
                index=index,
                type=_field(payload, "type"),
            )
            continue
        annotations.append(annotation)
    return annotations


__all__ = [
    "AnnotationKind",
    "Blockquote",
    "Bold",
    "Code",
    "CustomEmoji",
    "Italic",
    "Mention",
    "Pre",
    "RawAnnotation",
    "Spoiler",
    "Strikethrough",
    "TextLink",
    "TextMention",
    "Underline",
    "Unsupported",
    "Url",
    "annotation_from_payload",
    "annotations_from_payloads",
]
