from __future__ import annotations

import pytest
from jira_fixtures import issue_xml

from issuegraph.cache import ResponseCache
from issuegraph.errors import FetchError
from issuegraph.jira_client import JiraXmlClient
from issuegraph.source import InMemoryIssueSource, JiraIssueSource


class _FakeClient(JiraXmlClient):
    def __init__(self, documents: dict[str, str]):
        self.documents = documents
        self.calls: list[str] = []
        self.closed = False

    def fetch_issue_xml(self, key: str) -> str:  # type: ignore[override]
        self.calls.append(key)
        try:
            return self.documents[key]
        except KeyError:
            raise FetchError(key, "GET failed with 404") from None

    def close(self) -> None:
        self.closed = True


class _SequenceClient(_FakeClient):
    """Answers successive requests with the next queued body."""

    def __init__(self, bodies: list[str]):
        super().__init__({})
        self.bodies = list(bodies)

    def fetch_issue_xml(self, key: str) -> str:  # type: ignore[override]
        self.calls.append(key)
        return self.bodies.pop(0)


def test_fetch_parses_document():
    client = _FakeClient({"PROJ-1": issue_xml("PROJ-1", subtasks=["PROJ-2"])})
    record = JiraIssueSource(client).fetch("PROJ-1")
    assert record.key == "PROJ-1"
    assert record.subtasks == ("PROJ-2",)


def test_cache_written_after_fetch_and_reused(tmp_path):
    client = _FakeClient({"PROJ-1": issue_xml("PROJ-1")})
    cache = ResponseCache(tmp_path)
    source = JiraIssueSource(client, cache=cache)

    source.fetch("PROJ-1")
    source.fetch("PROJ-1")

    assert client.calls == ["PROJ-1"]
    assert cache.read("PROJ-1") == issue_xml("PROJ-1")


def test_cache_hit_skips_network(tmp_path):
    cache = ResponseCache(tmp_path)
    cache.write("PROJ-1", issue_xml("PROJ-1", status="Closed"))
    client = _FakeClient({})

    record = JiraIssueSource(client, cache=cache).fetch("PROJ-1")
    assert record.is_done
    assert client.calls == []


def test_failed_fetch_is_not_cached(tmp_path):
    cache = ResponseCache(tmp_path)
    source = JiraIssueSource(_FakeClient({}), cache=cache)
    with pytest.raises(FetchError):
        source.fetch("PROJ-1")
    assert cache.read("PROJ-1") is None


def test_unparseable_response_is_not_cached(tmp_path):
    client = _SequenceClient(["<html>login page</html", issue_xml("PROJ-1")])
    cache = ResponseCache(tmp_path)
    source = JiraIssueSource(client, cache=cache)

    with pytest.raises(FetchError):
        source.fetch("PROJ-1")
    assert cache.read("PROJ-1") is None

    assert source.fetch("PROJ-1").key == "PROJ-1"
    assert client.calls == ["PROJ-1", "PROJ-1"]
    assert cache.read("PROJ-1") == issue_xml("PROJ-1")


def test_unwritable_cache_still_returns_record(tmp_path):
    blocker = tmp_path / "cache"
    blocker.write_text("not a directory")
    client = _FakeClient({"PROJ-1": issue_xml("PROJ-1")})

    record = JiraIssueSource(client, cache=ResponseCache(blocker)).fetch("PROJ-1")
    assert record.key == "PROJ-1"


def test_close_closes_client():
    client = _FakeClient({})
    JiraIssueSource(client).close()
    assert client.closed


def test_link_types_forwarded_to_parser():
    doc = issue_xml("PROJ-1", depends_on=["PROJ-2"], blocks=["PROJ-3"])
    source = JiraIssueSource(_FakeClient({"PROJ-1": doc}), link_types=["blocks"])
    assert source.fetch("PROJ-1").outward_links == ("PROJ-3",)


def test_in_memory_source_unknown_issue():
    source = InMemoryIssueSource({})
    with pytest.raises(FetchError):
        source.fetch("NOPE-1")
    assert source.fetch_log == ["NOPE-1"]
