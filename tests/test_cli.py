from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from entity_html.cli import app, decode_message
from entity_html.errors import PayloadError

runner = CliRunner()

pytestmark = pytest.mark.integration

CROSSING_MESSAGE = json.dumps(
    {
        "text": "Hello World",
        "entities": [
            {"type": "bold", "offset": 0, "length": 8},
            {"type": "italic", "offset": 3, "length": 8},
        ],
    }
)


def test_render_from_file(message_file) -> None:
    result = runner.invoke(app, ["render", str(message_file(CROSSING_MESSAGE))])
    assert result.exit_code == 0
    assert result.output == "<strong>Hel<em>lo Wo</em></strong><em>rld</em>\n"


def test_render_from_stdin() -> None:
    payload = json.dumps({"text": "a < b", "entities": []})
    result = runner.invoke(app, ["render"], input=payload)
    assert result.exit_code == 0
    assert result.output == "a &lt; b\n"


def test_render_caption_message(message_file) -> None:
    payload = json.dumps(
        {
            "caption": "photo caption",
            "caption_entities": [{"type": "italic", "offset": 6, "length": 7}],
        }
    )
    result = runner.invoke(app, ["render", str(message_file(payload))])
    assert result.exit_code == 0
    assert result.output == "photo <em>caption</em>\n"


def test_render_with_config(message_file, tmp_path) -> None:
    config_path = tmp_path / "entity-html.yml"
    config_path.write_text("renderer:\n  escape_pre: false\n")
    payload = json.dumps(
        {"text": "<x>", "entities": [{"type": "pre", "offset": 0, "length": 3}]}
    )
    result = runner.invoke(
        app, ["render", str(message_file(payload)), "--config", str(config_path)]
    )
    assert result.exit_code == 0
    assert result.output == "<pre><code><x></code></pre>\n"


def test_render_rejects_invalid_json() -> None:
    result = runner.invoke(app, ["render"], input="{not json")
    assert result.exit_code == 1
    assert "not valid JSON" in result.output


def test_render_rejects_bad_config(message_file, tmp_path) -> None:
    config_path = tmp_path / "entity-html.yml"
    config_path.write_text("renderer:\n  escape_pre: maybe\n")
    result = runner.invoke(
        app,
        ["render", str(message_file(CROSSING_MESSAGE)), "--config", str(config_path)],
    )
    assert result.exit_code == 1
    assert "escape_pre must be a boolean" in result.output


def test_render_missing_file(tmp_path) -> None:
    result = runner.invoke(app, ["render", str(tmp_path / "nope.json")])
    assert result.exit_code == 1
    assert "Unable to read" in result.output


def test_render_rejects_non_utf8_file(tmp_path) -> None:
    path = tmp_path / "message.json"
    path.write_bytes(b'{"text": "\xff\xfe", "entities": []}')
    result = runner.invoke(app, ["render", str(path)])
    assert result.exit_code == 1
    assert "is not valid UTF-8" in result.output
    assert not isinstance(result.exception, UnicodeDecodeError)


def test_spans_command_lists_surviving_spans(message_file) -> None:
    payload = json.dumps(
        {
            "text": "Hi @bob ",
            "entities": [
                {"type": "mention", "offset": 3, "length": 5},
                {"type": "bold", "offset": 40, "length": 2},
            ],
        }
    )
    result = runner.invoke(app, ["spans", str(message_file(payload))])
    assert result.exit_code == 0
    lines = [json.loads(line) for line in result.output.splitlines()]
    assert lines == [
        {"id": 0, "start": 3, "length": 4, "kind": "MentionLink", "username": "bob"}
    ]


def test_version_flag() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.output.startswith("entity-html ")


@pytest.mark.parametrize(
    ("raw", "message"),
    [
        ("[]", "must be a JSON object"),
        ('{"text": 3}', "string 'text' or 'caption'"),
        ('{"text": "a", "entities": {}}', "entities must be a list"),
    ],
)
def test_decode_message_errors(raw, message) -> None:
    with pytest.raises(PayloadError, match=message):
        decode_message(raw)
