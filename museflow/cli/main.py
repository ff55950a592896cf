"""Command-line front end for MuseFlow.

Usage::

    python -m museflow.cli run summarize --text "Long article ..."
    python -m museflow.cli run translate --file notes.txt --option targetLanguage=French
    python -m museflow.cli stats
    python -m museflow.cli clear-cache
    python -m museflow.cli serve --port 8000

``run``, ``stats`` and ``clear-cache`` go through the same request router
as the HTTP API and print the response envelope as JSON.  With the
default in-memory store the cache only lives for one invocation; set
``KV_BACKEND=sqlite`` to share it across runs.  Logs go to stderr so
stdout stays parseable.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from museflow.config.settings import Settings
from museflow.models.actions import CONTENT_ACTIONS, ActionKind, RequestSource
from museflow.utils.logging import configure_logging


def parse_option(raw: str) -> tuple[str, Any]:
    """Split ``key=value``; the value is decoded as JSON when it parses."""
    key, sep, value = raw.partition("=")
    if not sep or not key.strip():
        raise argparse.ArgumentTypeError(f"Expected key=value, got {raw!r}")
    try:
        decoded: Any = json.loads(value)
    except ValueError:
        decoded = value
    return key.strip(), decoded


def _read_text(args: argparse.Namespace) -> str:
    if args.file:
        return Path(args.file).read_text(encoding="utf-8")
    if args.text is not None:
        return args.text
    if not sys.stdin.isatty():
        return sys.stdin.read()
    return ""


async def _dispatch(settings: Settings, request: dict[str, Any]) -> dict[str, Any]:
    # Deferred so ``--help`` does not pay for SDK imports.
    from museflow.main import build_context

    ctx = build_context(settings)
    await ctx.startup()
    try:
        response = await ctx.router.handle(request)
    finally:
        await ctx.aclose()
    return response.to_wire()


def _emit(payload: dict[str, Any]) -> int:
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0 if payload.get("success") else 1


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _cmd_run(args: argparse.Namespace, settings: Settings) -> int:
    request = {
        "action": args.action,
        "text": _read_text(args),
        "options": dict(args.option or []),
        "source": RequestSource.CLI.value,
    }
    return _emit(asyncio.run(_dispatch(settings, request)))


def _cmd_stats(args: argparse.Namespace, settings: Settings) -> int:
    request = {"action": ActionKind.GET_CACHE_STATS.value, "source": RequestSource.CLI.value}
    return _emit(asyncio.run(_dispatch(settings, request)))


def _cmd_clear_cache(args: argparse.Namespace, settings: Settings) -> int:
    request = {"action": ActionKind.CLEAR_CACHE.value, "source": RequestSource.CLI.value}
    return _emit(asyncio.run(_dispatch(settings, request)))


def _cmd_serve(args: argparse.Namespace, settings: Settings) -> int:
    import uvicorn

    uvicorn.run(
        "museflow.main:app",
        host=args.host or settings.app_host,
        port=args.port or settings.app_port,
        reload=args.reload,
    )
    return 0


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m museflow.cli",
        description="Run MuseFlow text actions from the command line.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show INFO-level logs on stderr.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run one content action.")
    run.add_argument(
        "action",
        choices=sorted(kind.value for kind in CONTENT_ACTIONS),
        help="Action to run.",
    )
    source = run.add_mutually_exclusive_group()
    source.add_argument("--text", "-t", type=str, default=None, help="Input text.")
    source.add_argument("--file", "-f", type=str, default=None, help="Read input text from a file.")
    run.add_argument(
        "--option", "-o",
        action="append",
        type=parse_option,
        metavar="KEY=VALUE",
        help="Action option (repeatable), e.g. summaryLength=short.",
    )
    run.set_defaults(handler=_cmd_run)

    stats = sub.add_parser("stats", help="Print cache statistics.")
    stats.set_defaults(handler=_cmd_stats)

    clear = sub.add_parser("clear-cache", help="Remove every cache entry.")
    clear.set_defaults(handler=_cmd_clear_cache)

    serve = sub.add_parser("serve", help="Start the HTTP API with uvicorn.")
    serve.add_argument("--host", type=str, default=None)
    serve.add_argument("--port", type=int, default=None)
    serve.add_argument("--reload", action="store_true")
    serve.set_defaults(handler=_cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = Settings()
    configure_logging(
        log_level="INFO" if args.verbose else "WARNING",
        stream=sys.stderr,
    )
    return args.handler(args, settings)


if __name__ == "__main__":
    sys.exit(main())
