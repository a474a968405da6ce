"""Runtime helpers for issuegraph CLI orchestration."""

from __future__ import annotations

import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol

from issuegraph.config import GraphConfig, default_config, load_config, parse_annotation
from issuegraph.errors import redact
from issuegraph.logging import configure_logging, get_logger

CONFIG_DEFAULT = "issuegraph.yaml"


class _HandlerCallable(Protocol):
    def __call__(self) -> Any: ...


def _load_base_config(
    args: Any, loader: Callable[[str | Path], GraphConfig]
) -> GraphConfig:
    explicit = getattr(args, "config", None)
    if explicit:
        return loader(explicit)
    if Path(CONFIG_DEFAULT).exists():
        return loader(CONFIG_DEFAULT)
    return default_config()


def apply_overrides(cfg: GraphConfig, args: Any) -> GraphConfig:
    """Layer command-line values over the file / environment configuration."""
    root = getattr(args, "root", None)
    if root:
        cfg.root_issue = root
    for attr, name in (
        ("base_url", "base_url"),
        ("user", "username"),
        ("password", "password"),
    ):
        value = getattr(args, attr, None)
        if value:
            setattr(cfg, name, value)
    if getattr(args, "insecure", False):
        cfg.verify_ssl = False
    stops = getattr(args, "stop", None) or []
    cfg.stop_issues = list(dict.fromkeys([*cfg.stop_issues, *stops]))
    for text in getattr(args, "annotate", None) or []:
        key, fragment = parse_annotation(text)
        cfg.edge_annotations[key] = fragment
    link_types = getattr(args, "link_type", None) or []
    if link_types:
        cfg.link_types = list(link_types)
    cache = getattr(args, "cache", None)
    if cache is not None:
        cfg.cache_enabled = bool(cache)
    cache_dir = getattr(args, "cache_dir", None)
    if cache_dir:
        cfg.cache_dir = Path(cache_dir)
    output_dir = getattr(args, "output_dir", None)
    if output_dir:
        cfg.output_dir = Path(output_dir)
    if getattr(args, "verbose", False):
        cfg.verbose = True
    if getattr(args, "json_logs", False):
        cfg.logging_json_enabled = True
    return cfg


def prepare_config(
    args: Any, *, loader: Callable[[str | Path], GraphConfig] = load_config
) -> GraphConfig:
    """Load GraphConfig for the given argparse namespace and configure logging."""
    cfg = apply_overrides(_load_base_config(args, loader), args)
    configure_logging(json_logging=cfg.logging_json_enabled, level=cfg.effective_log_level)
    return cfg


def execute_command(
    handler: _HandlerCallable, cfg: GraphConfig | None, command: str
) -> int:
    """Execute a command handler, logging its duration and exit code."""
    logger = get_logger()
    context: dict[str, Any] = {"command": command}
    if cfg is not None and cfg.root_issue:
        context["root"] = cfg.root_issue
    start = time.monotonic()
    try:
        result = handler()
        exit_code = int(result) if result is not None else 0
    except Exception as exc:
        duration = max(0.0, time.monotonic() - start)
        logger.log_error(f"command {command} failed", error=redact(str(exc)), **context)
        logger.log_performance(command, duration * 1000, exit_code=1, **context)
        raise
    duration = max(0.0, time.monotonic() - start)
    logger.log_performance(command, duration * 1000, exit_code=exit_code, **context)
    return exit_code


__all__ = ["CONFIG_DEFAULT", "apply_overrides", "execute_command", "prepare_config"]
