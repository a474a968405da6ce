from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from .formatter import quote_id

GRAPH_PREAMBLE = (
    "digraph issues {\n"
    "rankdir=LR\n"
    "nodesep=0.3\n"
    "ranksep=0.6\n"
    'node [shape=box, style="rounded,filled", fontname="Helvetica", fontsize=10]\n'
)


def graph_label(root: str, generated_at: datetime) -> str:
    return f"{root} dependencies (generated {generated_at.strftime('%Y-%m-%d %H:%M %Z').strip()})"


def assemble_graph(
    root: str,
    nodes: Iterable[str],
    edges: Iterable[str],
    generated_at: datetime,
) -> str:
    label = quote_id(graph_label(root, generated_at))
    parts = [GRAPH_PREAMBLE, *nodes, *edges]
    parts.append(f"label={label}\n")
    parts.append(f"tooltip={label}\n")
    parts.append("}\n")
    return "".join(parts)


__all__ = ["GRAPH_PREAMBLE", "assemble_graph", "graph_label"]
