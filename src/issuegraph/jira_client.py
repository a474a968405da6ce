from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import quote

import requests

from .errors import FetchError

USER_AGENT = "issuegraph/0.1.0"
HTTP_ERROR_STATUS = 400
ISSUE_XML_PATH = "/si/jira.issueviews:issue-xml/{key}/{key}.xml"


class JiraAPIError(FetchError):
    """Raised when the JIRA server answers an issue request with an error status."""

    def __init__(
        self,
        issue_id: str,
        message: str,
        *,
        status: int | None = None,
        response_text: str | None = None,
    ):
        super().__init__(issue_id, message)
        self.status = status
        self.response_text = response_text


@dataclass
class JiraXmlClient:
    """Blocking HTTP client for the per-issue XML view of a JIRA server."""

    base_url: str
    username: str | None = None
    password: str | None = None
    verify_ssl: bool = True
    timeout: float = 30.0
    session: requests.Session | None = None
    _session: requests.Session = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._session = self.session or requests.Session()
        self._session.headers.setdefault("Accept", "application/xml")
        self._session.headers.setdefault("User-Agent", USER_AGENT)
        if self.username:
            self._session.auth = (self.username, self.password or "")

    def issue_url(self, key: str) -> str:
        encoded = quote(key, safe="")
        return self.base_url.rstrip("/") + ISSUE_XML_PATH.format(key=encoded)

    def fetch_issue_xml(self, key: str) -> str:
        url = self.issue_url(key)
        try:
            response = self._session.request(
                "GET",
                url,
                headers=self._session.headers,
                timeout=self.timeout,
                verify=self.verify_ssl,
            )
        except requests.RequestException as exc:
            raise FetchError(key, f"GET {url} failed: {exc}") from exc
        if response.status_code >= HTTP_ERROR_STATUS:
            raise JiraAPIError(
                key,
                f"GET {url} failed with {response.status_code}",
                status=response.status_code,
                response_text=response.text,
            )
        return response.text

    def close(self) -> None:
        self._session.close()


__all__ = ["JiraAPIError", "JiraXmlClient", "USER_AGENT"]
