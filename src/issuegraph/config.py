from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, cast

import yaml

from .errors import ConfigurationError
from .formatter import DEFAULT_WRAP_WIDTH

DEFAULT_TIMEOUT = 30.0
DEFAULT_CACHE_DIR = ".issuegraph_cache"
DEFAULT_EXTENSION = "dot"


@dataclass
class GraphConfig:
    root_issue: str | None = None
    # Issue source (JIRA XML view)
    base_url: str | None = None
    username: str | None = None
    password: str | None = None
    verify_ssl: bool = True
    timeout: float = DEFAULT_TIMEOUT
    # Traversal / rendering
    stop_issues: list[str] = field(default_factory=list)
    edge_annotations: dict[str, str] = field(default_factory=dict)
    link_types: list[str] = field(default_factory=list)
    wrap_width: int = DEFAULT_WRAP_WIDTH
    # Output
    output_dir: Path = field(default_factory=Path)
    output_extension: str = DEFAULT_EXTENSION
    # Cache
    cache_enabled: bool = False
    cache_dir: Path = field(default_factory=lambda: Path(DEFAULT_CACHE_DIR))
    # Logging configuration
    logging_json_enabled: bool = False
    logging_level: str = "WARNING"
    verbose: bool = False

    def validate(self) -> None:
        if not self.root_issue:
            raise ConfigurationError("No root issue specified")
        if not self.base_url:
            raise ConfigurationError(
                "No issue source specified (set jira.base_url, --base-url or ISSUEGRAPH_JIRA_URL)"
            )

    def output_path(self, root: str | None = None) -> Path:
        key = root or self.root_issue
        if not key:
            raise ConfigurationError("No root issue specified")
        return self.output_dir / f"{key}.{self.output_extension}"

    @property
    def effective_log_level(self) -> str:
        if self.verbose and self.logging_level.upper() not in ("DEBUG", "INFO"):
            return "INFO"
        return self.logging_level


def _resolve_env_var(value: Any, env_var_name: str | None = None) -> Any:
    """Resolve environment variable if value starts with $.

    Unset values fall back to ``env_var_name`` when one is given.
    """
    if isinstance(value, str) and value.startswith("$"):
        resolved = os.getenv(value[1:])
        if resolved is None and env_var_name:
            resolved = os.getenv(env_var_name)
        return resolved
    if value is None and env_var_name:
        return os.getenv(env_var_name)
    return value


def parse_annotation(text: str) -> tuple[str, str]:
    """Split a ``KEY=FRAGMENT`` command-line annotation."""
    key, sep, fragment = text.partition("=")
    if not sep or not key.strip() or not fragment.strip():
        raise ConfigurationError(f"Invalid edge annotation {text!r}; expected KEY=FRAGMENT")
    return key.strip(), fragment.strip()


def _string_list(value: Any, name: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise ConfigurationError(f"'{name}' must be a list")
    return [str(v) for v in value]


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    value = raw.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"'{name}' must be a mapping")
    return value


def default_config() -> GraphConfig:
    """Configuration used when no file is present (environment fallbacks only)."""
    return GraphConfig(
        base_url=os.getenv("ISSUEGRAPH_JIRA_URL"),
        username=os.getenv("ISSUEGRAPH_JIRA_USER"),
        password=os.getenv("ISSUEGRAPH_JIRA_PASSWORD"),
    )


def load_config(path: str | Path) -> GraphConfig:
    p = Path(path)
    if not p.exists():
        raise ConfigurationError(f"Configuration file not found: {p}")
    try:
        raw = cast(dict[str, Any], yaml.safe_load(p.read_text(encoding="utf-8")) or {})
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {p}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Configuration root must be a mapping: {p}")
    jira = _section(raw, "jira")
    graph = _section(raw, "graph")
    out = _section(raw, "output")
    cache = _section(raw, "cache")
    logging_config = _section(raw, "logging")
    root = graph.get("root")

    annotations_raw = graph.get("edge_annotations", {}) or {}
    if not isinstance(annotations_raw, dict):
        raise ConfigurationError("'graph.edge_annotations' must be a mapping")

    base = p.parent
    return GraphConfig(
        root_issue=str(root) if root is not None else None,
        base_url=_resolve_env_var(jira.get("base_url"), "ISSUEGRAPH_JIRA_URL"),
        username=_resolve_env_var(jira.get("username"), "ISSUEGRAPH_JIRA_USER"),
        password=_resolve_env_var(jira.get("password"), "ISSUEGRAPH_JIRA_PASSWORD"),
        verify_ssl=bool(jira.get("verify_ssl", True)),
        timeout=float(jira.get("timeout", DEFAULT_TIMEOUT)),
        stop_issues=_string_list(graph.get("stop_issues"), "graph.stop_issues"),
        edge_annotations={str(k): str(v) for k, v in annotations_raw.items()},
        link_types=_string_list(graph.get("link_types"), "graph.link_types"),
        wrap_width=int(graph.get("wrap_width", DEFAULT_WRAP_WIDTH)),
        output_dir=base / out.get("directory", "."),
        output_extension=str(out.get("extension", DEFAULT_EXTENSION)).lstrip("."),
        cache_enabled=bool(cache.get("enabled", False)),
        cache_dir=base / cache.get("directory", DEFAULT_CACHE_DIR),
        logging_json_enabled=bool(logging_config.get("json_enabled", False)),
        logging_level=str(logging_config.get("level", "WARNING")),
    )


__all__ = ["GraphConfig", "default_config", "load_config", "parse_annotation"]
