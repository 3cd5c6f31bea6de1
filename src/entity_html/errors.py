"""Error hierarchy for the configuration and payload surfaces.

Rendering itself never raises; these errors only come out of config loading
and message decoding done on behalf of callers such as the CLI.
"""

from __future__ import annotations

from typing import Optional


class EntityHtmlError(Exception):
    """Base error for entity_html surfaces."""

    def __init__(self, message: str, *, user_message: Optional[str] = None) -> None:
        super().__init__(message)
        self.user_message = user_message or message


class ConfigError(EntityHtmlError):
    """Invalid or unreadable renderer configuration."""


class PayloadError(EntityHtmlError):
    """Message payload that cannot be decoded into text and entities."""
