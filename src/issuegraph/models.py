from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class IssueStatus(Enum):
    OPEN = "Open"
    CLOSED = "Closed"
    RESOLVED = "Resolved"
    OTHER = "Other"

    @classmethod
    def from_name(cls, name: str | None) -> IssueStatus:
        text = (name or "").strip().lower()
        for member in (cls.OPEN, cls.CLOSED, cls.RESOLVED):
            if text == member.value.lower():
                return member
        return cls.OTHER


@dataclass(frozen=True)
class IssueRecord:
    """One fetched issue. Immutable once built by the parser."""

    key: str
    status: IssueStatus
    status_name: str = ""
    priority: str = ""
    assignee: str = ""
    summary: str = ""
    outward_links: tuple[str, ...] = ()
    subtasks: tuple[str, ...] = ()
    link: str = ""
    missing_fields: tuple[str, ...] = ()

    @property
    def is_done(self) -> bool:
        return self.status in (IssueStatus.CLOSED, IssueStatus.RESOLVED)

    @property
    def children(self) -> tuple[str, ...]:
        """Sub-tasks first, then outward links, in discovery order."""
        return self.subtasks + self.outward_links

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "status": self.status_name or self.status.value,
            "priority": self.priority,
            "assignee": self.assignee,
            "summary": self.summary,
            "subtasks": list(self.subtasks),
            "outward_links": list(self.outward_links),
            "link": self.link,
            "missing_fields": list(self.missing_fields),
        }


__all__ = ["IssueRecord", "IssueStatus"]
