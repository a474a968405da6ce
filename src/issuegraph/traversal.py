"""Breadth-first discovery of the open-issue subgraph reachable from a root.

All per-run state lives on a ``TraversalContext`` created by
``TraversalEngine.run``; the engine itself only holds configuration, so one
engine can be reused for any number of independent runs.
"""

from __future__ import annotations

import dataclasses
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field

from .formatter import DEFAULT_WRAP_WIDTH, format_node
from .logging import StructuredLogger, get_logger
from .models import IssueRecord
from .source import IssueSource


@dataclass
class TraversalContext:
    root: str
    worklist: deque[str] = field(default_factory=deque)
    visited: set[str] = field(default_factory=set)
    retained: set[str] = field(default_factory=set)
    node_order: list[str] = field(default_factory=list)
    nodes: dict[str, str] = field(default_factory=dict)
    links: dict[str, list[str]] = field(default_factory=dict)
    skipped: dict[str, str] = field(default_factory=dict)
    fetched: list[str] = field(default_factory=list)
    processed: int = 0

    def __post_init__(self) -> None:
        if not self.worklist:
            self.worklist.append(self.root)


@dataclass(frozen=True)
class TraversalResult:
    root: str
    node_order: tuple[str, ...]
    nodes: dict[str, str]
    retained: frozenset[str]
    links: dict[str, list[str]]
    skipped: dict[str, str]
    fetched: tuple[str, ...]
    processed: int

    @classmethod
    def from_context(cls, ctx: TraversalContext) -> TraversalResult:
        return cls(
            root=ctx.root,
            node_order=tuple(ctx.node_order),
            nodes=dict(ctx.nodes),
            retained=frozenset(ctx.retained),
            links={k: list(v) for k, v in ctx.links.items()},
            skipped=dict(ctx.skipped),
            fetched=tuple(ctx.fetched),
            processed=ctx.processed,
        )

    def node_blocks(self) -> list[str]:
        return [self.nodes[key] for key in self.node_order]


class TraversalEngine:
    def __init__(
        self,
        source: IssueSource,
        stop_issues: Iterable[str] = (),
        *,
        wrap_width: int = DEFAULT_WRAP_WIDTH,
        logger: StructuredLogger | None = None,
    ) -> None:
        self.source = source
        self.stop_issues = frozenset(stop_issues)
        self.wrap_width = wrap_width
        self._logger = logger or get_logger()

    def run(self, root: str) -> TraversalResult:
        """Walk from ``root`` until the worklist is empty.

        ``FetchError`` from the source propagates unchanged; no partial result
        is returned.
        """
        ctx = TraversalContext(root=root)
        while ctx.worklist:
            issue_id = ctx.worklist.popleft()
            if issue_id in ctx.visited:
                continue
            ctx.visited.add(issue_id)
            self.step(ctx, issue_id)
        return TraversalResult.from_context(ctx)

    def step(self, ctx: TraversalContext, issue_id: str) -> None:
        record = self._fetch(ctx, issue_id)
        if record.is_done:
            ctx.skipped[issue_id] = record.status_name or record.status.value
            self._logger.log_issue_event("skipped", issue_id, status=ctx.skipped[issue_id])
            return

        ctx.nodes[issue_id] = format_node(record, self.wrap_width)
        ctx.node_order.append(issue_id)
        ctx.retained.add(issue_id)
        ctx.processed += 1

        if issue_id in self.stop_issues:
            self._logger.log_issue_event("stopped", issue_id)
            return

        children = list(record.children)
        ctx.links[issue_id] = children
        ctx.worklist.extend(children)
        self._logger.log_issue_event("retained", issue_id, children=len(children))

    def _fetch(self, ctx: TraversalContext, issue_id: str) -> IssueRecord:
        self._logger.log_issue_event("fetching", issue_id)
        record = self.source.fetch(issue_id)
        ctx.fetched.append(issue_id)
        if record.key != issue_id:
            # Moved issues answer under their new key; the requested identifier stays canonical.
            self._logger.warning(
                "issue answered under a different key", issue_id=issue_id, actual=record.key
            )
            record = dataclasses.replace(record, key=issue_id)
        return record


__all__ = ["TraversalContext", "TraversalEngine", "TraversalResult"]
