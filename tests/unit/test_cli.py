"""Unit tests for the museflow.cli command-line front end."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from unittest.mock import patch

import pytest

import museflow.main
from museflow.cli.main import _build_parser, main, parse_option
from tests.conftest import SAMPLE_TEXT, RecordingProvider, make_config

_real_build_context = museflow.main.build_context


# ======================================================================
# Shared helpers
# ======================================================================


@pytest.fixture()
def provider() -> RecordingProvider:
    return RecordingProvider("primary", ["A short summary. It has two sentences."])


@pytest.fixture()
def patched_context(provider: RecordingProvider):
    """Route every CLI dispatch through an in-memory context with a scripted provider."""

    def _build(settings):
        return _real_build_context(settings, config=make_config(), providers=[provider])

    with patch("museflow.main.build_context", side_effect=_build) as build:
        yield build


def _run(argv: list[str], capsys: pytest.CaptureFixture[str]) -> tuple[int, dict]:
    code = main(argv)
    return code, json.loads(capsys.readouterr().out)


# ======================================================================
# parse_option
# ======================================================================


class TestParseOption:
    def test_plain_string(self) -> None:
        assert parse_option("targetLanguage=French") == ("targetLanguage", "French")

    def test_json_values_are_decoded(self) -> None:
        assert parse_option("ideaCount=3") == ("ideaCount", 3)
        assert parse_option("includeKeyPoints=true") == ("includeKeyPoints", True)
        assert parse_option('focusAreas=["cost","time"]') == ("focusAreas", ["cost", "time"])

    def test_value_may_contain_equals(self) -> None:
        assert parse_option("domain=a=b") == ("domain", "a=b")

    @pytest.mark.parametrize("raw", ["no-separator", "=value"])
    def test_malformed(self, raw: str) -> None:
        with pytest.raises(argparse.ArgumentTypeError):
            parse_option(raw)


# ======================================================================
# Parser
# ======================================================================


class TestParser:
    def test_run_defaults(self) -> None:
        args = _build_parser().parse_args(["run", "rewrite", "--text", "hello"])
        assert args.action == "rewrite"
        assert args.text == "hello"
        assert args.option is None
        assert args.verbose is False

    def test_control_actions_are_not_runnable(self) -> None:
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["run", "clearCache"])

    def test_text_and_file_are_exclusive(self) -> None:
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["run", "summarize", "--text", "a", "--file", "b"])

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            _build_parser().parse_args([])


# ======================================================================
# Commands
# ======================================================================


class TestRunCommand:
    def test_summarize_prints_envelope(
        self,
        patched_context,
        provider: RecordingProvider,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        code, payload = _run(
            ["run", "summarize", "--text", SAMPLE_TEXT, "-o", "summaryLength=short"], capsys
        )

        assert code == 0
        assert payload["success"] is True
        assert payload["data"]["summary"] == "A short summary. It has two sentences."
        assert payload["metadata"]["action"] == "summarize"
        assert provider.calls[0][1]["maxTokens"] == 150

    def test_reads_text_from_file(
        self,
        patched_context,
        provider: RecordingProvider,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        source = tmp_path / "notes.txt"
        source.write_text(SAMPLE_TEXT, encoding="utf-8")

        code, payload = _run(["run", "rewrite", "--file", str(source)], capsys)

        assert code == 0
        assert payload["data"]["originalText"] == SAMPLE_TEXT

    def test_failure_exits_nonzero(
        self,
        patched_context,
        provider: RecordingProvider,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        code, payload = _run(["run", "ideate", "--text", "tiny"], capsys)

        assert code == 1
        assert payload["success"] is False
        assert payload["error"].startswith("INSUFFICIENT_CONTEXT: ")
        assert provider.call_count == 0


class TestCacheCommands:
    def test_stats(self, patched_context, capsys: pytest.CaptureFixture[str]) -> None:
        code, payload = _run(["stats"], capsys)
        assert code == 0
        assert payload["data"]["totalEntries"] == 0

    def test_clear_cache(self, patched_context, capsys: pytest.CaptureFixture[str]) -> None:
        code, payload = _run(["clear-cache"], capsys)
        assert code == 0
        assert payload["data"] == {"cleared": 0}


class TestServeCommand:
    def test_serve_uses_cli_overrides(self) -> None:
        with patch("uvicorn.run") as run:
            assert main(["serve", "--port", "9001"]) == 0

        assert run.call_args.args == ("museflow.main:app",)
        assert run.call_args.kwargs["port"] == 9001
        assert run.call_args.kwargs["reload"] is False
