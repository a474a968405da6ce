"""issuegraph CLI.

Subcommands:
  render       -> walk from a root issue and write the Graphviz DOT document
  inspect      -> fetch one issue and print the parsed record as JSON
  clear-cache  -> delete cached issue documents
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from issuegraph.cache import ResponseCache
from issuegraph.config import GraphConfig
from issuegraph.core import IssueGraph
from issuegraph.errors import IssueGraphError, classify_error
from issuegraph.runtime import CONFIG_DEFAULT, execute_command, prepare_config

_MAX_HELP_WIDTH = 100


class _HelpFormatter(argparse.HelpFormatter):
    def __init__(self, prog: str) -> None:
        super().__init__(prog, max_help_position=30, width=_MAX_HELP_WIDTH)


class _FormatterArgumentParser(argparse.ArgumentParser):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("formatter_class", _HelpFormatter)
        super().__init__(*args, **kwargs)


def _add_config_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config", help=f"YAML configuration file (default: {CONFIG_DEFAULT} if present)")
    p.add_argument("--verbose", "-v", action="store_true", help="Log per-issue progress")
    p.add_argument("--json-logs", action="store_true", help="Emit logs as JSON lines")


def _add_source_args(p: argparse.ArgumentParser) -> None:
    _add_config_args(p)
    p.add_argument("--base-url", help="JIRA base URL (env: ISSUEGRAPH_JIRA_URL)")
    p.add_argument("--user", help="JIRA username (env: ISSUEGRAPH_JIRA_USER)")
    p.add_argument("--password", help="JIRA password (env: ISSUEGRAPH_JIRA_PASSWORD)")
    p.add_argument("--insecure", action="store_true", help="Skip TLS certificate verification")
    p.add_argument(
        "--cache",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Read and write fetched issue documents in the cache directory",
    )
    p.add_argument("--cache-dir", help="Cache directory (default: .issuegraph_cache)")
    p.add_argument(
        "--link-type",
        action="append",
        default=[],
        help="Only follow outward links with this description (repeatable)",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Construct top-level CLI parser with subcommands."""
    p = _FormatterArgumentParser(
        prog="issuegraph", description="Render issue dependency graphs as Graphviz DOT"
    )
    p.add_argument("--quiet", action="store_true", help="Suppress informational output")
    sub = p.add_subparsers(
        dest="cmd",
        required=True,
        parser_class=_FormatterArgumentParser,
        metavar="<command>",
    )

    pr = sub.add_parser("render", help="Walk from a root issue and write the DOT document")
    pr.add_argument("root", nargs="?", help="Root issue key (or graph.root in config)")
    _add_source_args(pr)
    pr.add_argument(
        "--stop",
        action="append",
        default=[],
        metavar="KEY",
        help="Do not expand past this issue (repeatable)",
    )
    pr.add_argument(
        "--annotate",
        action="append",
        default=[],
        metavar="KEY=FRAGMENT",
        help="Append FRAGMENT to every edge pointing at KEY, e.g. 'PROJ-2=[minlen=2]'",
    )
    pr.add_argument("--output-dir", help="Directory for <ROOT>.dot (default: .)")
    pr.add_argument("--output", type=Path, help="Explicit output file path")
    pr.add_argument("--stdout", action="store_true", help="Print the document instead of writing it")

    pi = sub.add_parser("inspect", help="Fetch one issue and print the parsed record")
    pi.add_argument("key", help="Issue key")
    _add_source_args(pi)

    pc = sub.add_parser("clear-cache", help="Delete cached issue documents")
    _add_config_args(pc)
    pc.add_argument("--cache-dir", help="Cache directory (default: .issuegraph_cache)")
    return p


def _cmd_render(cfg: GraphConfig, args: argparse.Namespace) -> int:
    cfg.validate()
    graph = IssueGraph(cfg)
    try:
        build = graph.build()
    finally:
        graph.close()
    if args.stdout:
        sys.stdout.write(build.document)
        return 0
    path = graph.write(build, args.output)
    print(path)
    if not args.quiet:
        summary = build.summary()
        print(
            f"[render] {build.root}: {summary['nodes']} nodes, {summary['edges']} edges, "
            f"{summary['skipped']} closed/resolved skipped",
            file=sys.stderr,
        )
    return 0


def _cmd_inspect(cfg: GraphConfig, args: argparse.Namespace) -> int:
    graph = IssueGraph(cfg)
    try:
        record = graph.source.fetch(args.key)
    finally:
        graph.close()
    print(json.dumps(record.to_dict(), indent=2))
    return 0


def _cmd_clear_cache(cfg: GraphConfig, args: argparse.Namespace) -> int:
    removed = ResponseCache(cfg.cache_dir).clear()
    if not args.quiet:
        print(f"[clear-cache] removed {removed} file(s) from {cfg.cache_dir}")
    return 0


def _build_handlers(args: argparse.Namespace, cfg: GraphConfig) -> dict[str, Any]:
    return {
        "render": lambda: _cmd_render(cfg, args),
        "inspect": lambda: _cmd_inspect(cfg, args),
        "clear-cache": lambda: _cmd_clear_cache(cfg, args),
    }


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        cfg = prepare_config(args)
        handler = _build_handlers(args, cfg).get(args.cmd)
        if handler is None:  # pragma: no cover - argparse enforces valid choices
            parser.print_help()
            return 1
        return execute_command(handler, cfg, args.cmd)
    except IssueGraphError as exc:
        info = classify_error(exc)
        print(f"[issuegraph] {info.category}: {info.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
