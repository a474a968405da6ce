from __future__ import annotations

from collections.abc import Collection, Mapping, Sequence

from .formatter import quote_id


def format_edge(source: str, target: str, annotation: str | None = None) -> str:
    line = f"{quote_id(source)}->{quote_id(target)}"
    if annotation:
        line += f" {annotation}"
    return line + "\n"


def resolve_edges(
    links: Mapping[str, Sequence[str]],
    retained: Collection[str],
    annotations: Mapping[str, str] | None = None,
) -> list[str]:
    """Turn the link table into edge lines between retained issues only.

    Targets that were filtered out or never reached are dropped without error.
    A pair listed twice (sub-task and outward link) yields one edge.
    """
    annotations = annotations or {}
    seen: set[tuple[str, str]] = set()
    edges: list[str] = []
    for source, targets in links.items():
        if source not in retained:
            continue
        for target in targets:
            if target not in retained or (source, target) in seen:
                continue
            seen.add((source, target))
            edges.append(format_edge(source, target, annotations.get(target)))
    return edges


__all__ = ["format_edge", "resolve_edges"]
