import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import Any, NoReturn, Optional

import typer

from .annotations import RawAnnotation, annotations_from_payloads
from .config import RendererConfig, load_config
from .errors import ConfigError, PayloadError
from .logging_utils import log_event
from .renderer import render
from .spans import classify_annotations

logger = logging.getLogger("entity_html.cli")

app = typer.Typer(add_completion=False)


def get_version() -> str:
    import importlib.metadata

    try:
        return importlib.metadata.version("entity-html")
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


def raise_exit(message: str, *, cause: Optional[BaseException] = None) -> NoReturn:
    typer.echo(message, err=True)
    if cause is not None:
        raise typer.Exit(code=1) from cause
    raise typer.Exit(code=1)


def decode_message(raw: str) -> tuple[str, list[RawAnnotation]]:
    """Decode ``{"text": ..., "entities": [...]}`` (or caption fields)."""
    try:
        payload: Any = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise PayloadError(f"Message is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise PayloadError("Message must be a JSON object")
    if "text" in payload:
        text, entities = payload.get("text"), payload.get("entities")
    else:
        text, entities = payload.get("caption"), payload.get("caption_entities")
    if not isinstance(text, str):
        raise PayloadError("Message needs a string 'text' or 'caption' field")
    if entities is not None and not isinstance(entities, list):
        raise PayloadError("Message entities must be a list")
    return text, annotations_from_payloads(entities)


def _read_message(path: Optional[Path]) -> tuple[str, list[RawAnnotation]]:
    source = "stdin" if path is None else str(path)
    try:
        if path is None:
            raw = sys.stdin.read()
        else:
            raw = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise_exit(f"Message in {source} is not valid UTF-8: {exc}", cause=exc)
    except OSError as exc:
        raise_exit(f"Unable to read {source}: {exc}", cause=exc)
    try:
        return decode_message(raw)
    except PayloadError as exc:
        raise_exit(str(exc), cause=exc)


def _load_config(config_path: Optional[Path]) -> RendererConfig:
    try:
        return load_config(config_path)
    except ConfigError as exc:
        raise_exit(str(exc), cause=exc)


def _version_callback(value: bool) -> None:
    if not value:
        return
    typer.echo(f"entity-html {get_version()}")
    raise typer.Exit(code=0)


@app.callback()
def _root(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
    log_level: str = typer.Option(
        "WARNING", "--log-level", help="Logging level for stderr output."
    ),
) -> None:
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        stream=sys.stderr,
        format="%(levelname)s %(name)s %(message)s",
    )


@app.command("render")
def render_command(
    path: Optional[Path] = typer.Argument(
        None, help="JSON message file; reads stdin when omitted."
    ),
    config_path: Optional[Path] = typer.Option(
        None, "--config", help="Path to entity-html.yml"
    ),
) -> None:
    """Render a message's text and entities as HTML."""
    config = _load_config(config_path)
    text, annotations = _read_message(path)
    output = render(text, annotations, config=config)
    log_event(
        logger,
        logging.INFO,
        "entity_html.cli.rendered",
        annotations=len(annotations),
        chars=len(output),
    )
    typer.echo(output)


@app.command("spans")
def spans_command(
    path: Optional[Path] = typer.Argument(
        None, help="JSON message file; reads stdin when omitted."
    ),
) -> None:
    """Print the spans that survive validation, one JSON object per line."""
    text, annotations = _read_message(path)
    for span in classify_annotations(text, annotations):
        record = {
            "id": span.id,
            "start": span.start,
            "length": span.length,
            "kind": type(span.kind).__name__,
            **dataclasses.asdict(span.kind),
        }
        typer.echo(json.dumps(record, ensure_ascii=False))


def main() -> None:
    """Entrypoint for CLI execution."""
    app()
