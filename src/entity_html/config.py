from __future__ import annotations

import dataclasses
import logging
import os
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional, Union

import yaml

from .errors import ConfigError

logger = logging.getLogger("entity_html.config")

CONFIG_FILENAME = "entity-html.yml"

ENV_ESCAPE_PRE = "ENTITY_HTML_ESCAPE_PRE"
ENV_LINE_BREAK = "ENTITY_HTML_LINE_BREAK"

DEFAULT_LINE_BREAK = "<br>"


def _default_renderer_section() -> dict[str, Any]:
    return {
        "escape_pre": True,
        "line_break": DEFAULT_LINE_BREAK,
    }


@dataclasses.dataclass(frozen=True)
class RendererConfig:
    # False reproduces verbatim code blocks; see DESIGN.md for the tradeoff.
    escape_pre: bool = True
    line_break: str = DEFAULT_LINE_BREAK

    @classmethod
    def from_raw(
        cls,
        raw: Optional[Mapping[str, Any]],
        env: Optional[Mapping[str, str]] = None,
    ) -> "RendererConfig":
        """
        Build a RendererConfig from the ``renderer`` section of entity-html.yml
        and environment overrides.
        """
        env = os.environ if env is None else env
        merged: MutableMapping[str, Any] = _default_renderer_section()
        if raw is not None:
            if not isinstance(raw, Mapping):
                raise ConfigError("renderer section must be a mapping if provided")
            unknown = sorted(set(raw) - set(merged), key=str)
            if unknown:
                names = ", ".join(str(key) for key in unknown)
                raise ConfigError(f"renderer has unknown keys: {names}")
            merged.update(raw)

        explicit_escape = env.get(ENV_ESCAPE_PRE)
        if explicit_escape is not None:
            merged["escape_pre"] = _env_bool(explicit_escape, merged["escape_pre"])
        explicit_break = env.get(ENV_LINE_BREAK)
        if explicit_break is not None:
            merged["line_break"] = explicit_break

        escape_pre = merged.get("escape_pre")
        if not isinstance(escape_pre, bool):
            raise ConfigError("renderer.escape_pre must be a boolean")
        line_break = merged.get("line_break")
        if not isinstance(line_break, str):
            raise ConfigError("renderer.line_break must be a string")
        return cls(escape_pre=escape_pre, line_break=line_break)


def load_config(
    path: Optional[Union[str, Path]] = None,
    env: Optional[Mapping[str, str]] = None,
) -> RendererConfig:
    """Load config from ``path`` (or ./entity-html.yml when present)."""
    if path is None:
        candidate = Path.cwd() / CONFIG_FILENAME
        if not candidate.exists():
            return RendererConfig.from_raw(None, env=env)
        config_path = candidate
    else:
        config_path = Path(path)
    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Unable to read config {config_path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config {config_path} must contain a mapping")
    logger.debug("Loaded renderer config from %s", config_path)
    return RendererConfig.from_raw(data.get("renderer"), env=env)


def _env_bool(raw: Optional[str], default: bool) -> bool:
    if raw is None:
        return default
    normalized = raw.strip().lower()
    if normalized in ("1", "true", "yes", "on"):
        return True
    if normalized in ("0", "false", "no", "off"):
        return False
    return default


__all__ = [
    "CONFIG_FILENAME",
    "ENV_ESCAPE_PRE",
    "ENV_LINE_BREAK",
    "RendererConfig",
    "load_config",
]
