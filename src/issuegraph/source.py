"""Issue sources: the only I/O boundary the traversal engine talks to."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Protocol

from .cache import ResponseCache
from .errors import FetchError
from .jira_client import JiraXmlClient
from .logging import StructuredLogger, get_logger
from .models import IssueRecord
from .parser import parse_issue_xml


class IssueSource(Protocol):
    def fetch(self, issue_id: str) -> IssueRecord:
        """Return the record for ``issue_id`` or raise ``FetchError``."""
        ...  # pragma: no cover


class JiraIssueSource:
    """Fetch issues through the JIRA XML view, optionally via the on-disk cache."""

    def __init__(
        self,
        client: JiraXmlClient,
        *,
        cache: ResponseCache | None = None,
        link_types: Iterable[str] = (),
        logger: StructuredLogger | None = None,
    ) -> None:
        self.client = client
        self.cache = cache
        self.link_types = tuple(link_types)
        self._logger = logger or get_logger()

    def _parse(self, document: str, issue_id: str) -> IssueRecord:
        return parse_issue_xml(document, issue_id=issue_id, link_types=self.link_types)

    def fetch(self, issue_id: str) -> IssueRecord:
        if self.cache is not None:
            cached = self.cache.read(issue_id)
            if cached is not None:
                self._logger.debug("cache hit", issue_id=issue_id)
                return self._parse(cached, issue_id)
        document = self.client.fetch_issue_xml(issue_id)
        # Only documents that parse are cached; a login page or truncated body is not.
        record = self._parse(document, issue_id)
        if self.cache is not None:
            self.cache.write(issue_id, document)
        return record

    def close(self) -> None:
        self.client.close()


class InMemoryIssueSource:
    """Dict-backed source; records every fetch so callers can audit access."""

    def __init__(self, records: Mapping[str, IssueRecord] | Iterable[IssueRecord]) -> None:
        if isinstance(records, Mapping):
            self._records = dict(records)
        else:
            self._records = {record.key: record for record in records}
        self.fetch_log: list[str] = []

    def fetch(self, issue_id: str) -> IssueRecord:
        self.fetch_log.append(issue_id)
        try:
            return self._records[issue_id]
        except KeyError:
            raise FetchError(issue_id, "issue not found") from None


__all__ = ["InMemoryIssueSource", "IssueSource", "JiraIssueSource"]
