from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .assembler import assemble_graph
from .cache import ResponseCache
from .config import GraphConfig, load_config
from .errors import ConfigurationError
from .jira_client import JiraXmlClient
from .logging import StructuredLogger, get_logger
from .resolver import resolve_edges
from .source import IssueSource, JiraIssueSource
from .traversal import TraversalEngine, TraversalResult


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class GraphBuild:
    root: str
    document: str
    traversal: TraversalResult
    edges: list[str]
    generated_at: datetime

    def summary(self) -> dict[str, int]:
        return {
            "nodes": len(self.traversal.node_order),
            "edges": len(self.edges),
            "processed": self.traversal.processed,
            "fetched": len(self.traversal.fetched),
            "skipped": len(self.traversal.skipped),
        }


class IssueGraph:
    """Build the dependency graph document for a root issue.

    The source defaults to the JIRA XML view described by ``cfg``; tests and
    embedding callers can pass any ``IssueSource``.
    """

    def __init__(
        self,
        cfg: GraphConfig,
        *,
        source: IssueSource | None = None,
        clock: Callable[[], datetime] = _utcnow,
        logger: StructuredLogger | None = None,
    ) -> None:
        self.cfg = cfg
        self._logger = logger or get_logger()
        self._clock = clock
        self._source = source
        self._owned: JiraIssueSource | None = None

    @classmethod
    def from_config_path(cls, path: str | Path, **kwargs: Any) -> IssueGraph:
        return cls(load_config(path), **kwargs)

    @property
    def source(self) -> IssueSource:
        if self._source is None:
            self._source = self._build_source()
        return self._source

    def _build_source(self) -> JiraIssueSource:
        if not self.cfg.base_url:
            raise ConfigurationError(
                "No issue source specified (set jira.base_url, --base-url or ISSUEGRAPH_JIRA_URL)"
            )
        client = JiraXmlClient(
            base_url=self.cfg.base_url,
            username=self.cfg.username,
            password=self.cfg.password,
            verify_ssl=self.cfg.verify_ssl,
            timeout=self.cfg.timeout,
        )
        cache = ResponseCache(self.cfg.cache_dir) if self.cfg.cache_enabled else None
        self._owned = JiraIssueSource(
            client, cache=cache, link_types=self.cfg.link_types, logger=self._logger
        )
        return self._owned

    def close(self) -> None:
        """Release the HTTP session of a source this graph created itself."""
        if self._owned is not None:
            self._owned.close()
            self._owned = None
            self._source = None

    def _resolve_root(self, root: str | None) -> str:
        key = root or self.cfg.root_issue
        if not key:
            raise ConfigurationError("No root issue specified")
        return key

    def build(self, root: str | None = None) -> GraphBuild:
        key = self._resolve_root(root)
        engine = TraversalEngine(
            self.source,
            self.cfg.stop_issues,
            wrap_width=self.cfg.wrap_width,
            logger=self._logger,
        )
        with self._logger.timed_operation("traverse", root=key):
            result = engine.run(key)
        edges = resolve_edges(result.links, result.retained, self.cfg.edge_annotations)
        generated_at = self._clock()
        document = assemble_graph(key, result.node_blocks(), edges, generated_at)
        return GraphBuild(
            root=key,
            document=document,
            traversal=result,
            edges=edges,
            generated_at=generated_at,
        )

    def write(self, build: GraphBuild, output: Path | None = None) -> Path:
        path = output or self.cfg.output_path(build.root)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(build.document, encoding="utf-8")
        self._logger.log_operation("graph_written", path=str(path), **build.summary())
        return path

    def render(self, root: str | None = None, output: Path | None = None) -> Path:
        """Traverse, then write; a failed traversal leaves no output file behind."""
        return self.write(self.build(root), output)


__all__ = ["GraphBuild", "IssueGraph"]
