"""Render one issue record as a Graphviz node block."""

from __future__ import annotations

import html
import textwrap
from enum import Enum

from .models import IssueRecord

DEFAULT_WRAP_WIDTH = 28


class PriorityTier(Enum):
    P0 = ("P0", "red")
    P1 = ("P1", "orange")
    P2 = ("P2", "yellow")
    P3 = ("P3", "palegreen")
    UNPRIORITIZED = ("Not", "lightgrey")
    DEFAULT = ("", "white")

    def __init__(self, prefix: str, color: str) -> None:
        self.prefix = prefix
        self.color = color


# Evaluated in order; first case-sensitive prefix match wins.
_PRIORITY_RULES: tuple[PriorityTier, ...] = (
    PriorityTier.P0,
    PriorityTier.P1,
    PriorityTier.P2,
    PriorityTier.P3,
    PriorityTier.UNPRIORITIZED,
)


def classify_priority(priority: str | None) -> PriorityTier:
    text = priority or ""
    for tier in _PRIORITY_RULES:
        if text.startswith(tier.prefix):
            return tier
    return PriorityTier.DEFAULT


def quote_id(value: str) -> str:
    """Quote an identifier for use as a DOT node id or attribute value."""
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def wrap_summary(summary: str, width: int = DEFAULT_WRAP_WIDTH) -> str:
    lines = textwrap.wrap(summary, width=max(1, width)) or [""]
    return "<br/>".join(html.escape(line) for line in lines)


def format_node(record: IssueRecord, wrap_width: int = DEFAULT_WRAP_WIDTH) -> str:
    tier = classify_priority(record.priority)
    label = (
        '<<table border="0" cellborder="0" cellspacing="1">'
        f"<tr><td><b>{html.escape(record.key)}</b></td>"
        f"<td>{html.escape(record.priority)}</td></tr>"
        f'<tr><td colspan="2">{html.escape(record.assignee)}</td></tr>'
        f'<tr><td colspan="2">{wrap_summary(record.summary, wrap_width)}</td></tr>'
        "</table>>"
    )
    url = quote_id(record.link)
    return f"{quote_id(record.key)} [fillcolor={quote_id(tier.color)}, label={label}, tooltip={url}, URL={url}]\n"


__all__ = ["PriorityTier", "classify_priority", "format_node", "quote_id", "wrap_summary"]
