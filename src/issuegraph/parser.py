"""Parse the JIRA per-issue XML view into an ``IssueRecord``.

Expected shape (only the parts we read)::

    <rss><channel><item>
      <link>https://jira.example.com/browse/PROJ-1</link>
      <key id="10001">PROJ-1</key>
      <summary>Do the thing</summary>
      <status>Open</status>
      <priority>P1</priority>
      <assignee username="jdoe">Jane Doe</assignee>
      <issuelinks>
        <issuelinktype id="10000">
          <name>Dependency</name>
          <outwardlinks description="depends on">
            <issuelink><issuekey id="10002">PROJ-2</issuekey></issuelink>
          </outwardlinks>
        </issuelinktype>
      </issuelinks>
      <subtasks><subtask id="10003">PROJ-3</subtask></subtasks>
    </item></channel></rss>
"""

from __future__ import annotations

from collections.abc import Iterable
from xml.etree import (  # nosec B405 - documents come from the configured JIRA server
    ElementTree,
)

from .errors import FetchError, MissingFieldError
from .logging import get_logger
from .models import IssueRecord, IssueStatus

_OPTIONAL_FIELDS = ("status", "priority", "assignee", "summary", "link")


def _text(item: ElementTree.Element, tag: str) -> str | None:
    node = item.find(tag)
    if node is None:
        return None
    return (node.text or "").strip()


def _outward_links(item: ElementTree.Element, link_types: Iterable[str]) -> list[str]:
    wanted = {t.strip().lower() for t in link_types if t.strip()}
    keys: list[str] = []
    for relation in item.iterfind("issuelinks/issuelinktype/outwardlinks"):
        description = (relation.get("description") or "").strip().lower()
        if wanted and description not in wanted:
            continue
        for issuekey in relation.iterfind("issuelink/issuekey"):
            if issuekey.text and issuekey.text.strip():
                keys.append(issuekey.text.strip())
    return keys


def _subtasks(item: ElementTree.Element) -> list[str]:
    return [
        node.text.strip()
        for node in item.iterfind("subtasks/subtask")
        if node.text and node.text.strip()
    ]


def _find_item(root: ElementTree.Element) -> ElementTree.Element | None:
    if root.tag == "item":
        return root
    return root.find("channel/item")


def build_record(item: ElementTree.Element, *, link_types: Iterable[str] = ()) -> IssueRecord:
    key = _text(item, "key")
    if not key:
        raise MissingFieldError("key")
    values = {name: _text(item, name) for name in _OPTIONAL_FIELDS}
    missing = tuple(name for name, value in values.items() if value is None)
    if missing:
        get_logger().debug("issue document missing fields", issue_id=key, missing=list(missing))
    status_name = values["status"] or ""
    return IssueRecord(
        key=key,
        status=IssueStatus.from_name(status_name),
        status_name=status_name,
        priority=values["priority"] or "",
        assignee=values["assignee"] or "",
        summary=values["summary"] or "",
        outward_links=tuple(_outward_links(item, link_types)),
        subtasks=tuple(_subtasks(item)),
        link=values["link"] or "",
        missing_fields=missing,
    )


def parse_issue_xml(
    document: str, *, issue_id: str, link_types: Iterable[str] = ()
) -> IssueRecord:
    """Parse one issue document; any structural problem becomes a ``FetchError``."""
    try:
        root = ElementTree.fromstring(document)  # nosec B314 - see module import note
    except ElementTree.ParseError as exc:
        raise FetchError(issue_id, f"invalid XML: {exc}") from exc
    item = _find_item(root)
    if item is None:
        raise FetchError(issue_id, "XML document contains no issue item")
    try:
        return build_record(item, link_types=link_types)
    except MissingFieldError as exc:
        raise FetchError(issue_id, str(exc)) from exc


__all__ = ["build_record", "parse_issue_xml"]
