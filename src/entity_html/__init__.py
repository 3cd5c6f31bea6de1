"""Render Telegram-style formatting entities as well-nested HTML."""

from .annotations import (
    RawAnnotation,
    annotation_from_payload,
    annotations_from_payloads,
)
from .config import RendererConfig, load_config
from .formatter import EntityHtmlRenderer, RenderedText
from .renderer import render

__all__ = [
    "EntityHtmlRenderer",
    "RawAnnotation",
    "RenderedText",
    "RendererConfig",
    "annotation_from_payload",
    "annotations_from_payloads",
    "load_config",
    "render",
]
