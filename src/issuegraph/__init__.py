"""issuegraph - render issue-tracker dependency graphs as Graphviz DOT.

High-level public API (stable):

from issuegraph import IssueGraph, load_config

graph = IssueGraph.from_config_path('issuegraph.yaml')
path = graph.render('PROJ-1')   # writes PROJ-1.dot next to the config

Any object with ``fetch(issue_id) -> IssueRecord`` can stand in for the JIRA
source:

graph = IssueGraph(GraphConfig(), source=InMemoryIssueSource(records))
build = graph.build('PROJ-1')
print(build.document)
"""

from __future__ import annotations

from .config import GraphConfig, load_config
from .core import GraphBuild, IssueGraph
from .errors import ConfigurationError, FetchError, IssueGraphError, MissingFieldError
from .models import IssueRecord, IssueStatus
from .source import InMemoryIssueSource, IssueSource, JiraIssueSource
from .traversal import TraversalEngine, TraversalResult

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "FetchError",
    "GraphBuild",
    "GraphConfig",
    "InMemoryIssueSource",
    "IssueGraph",
    "IssueGraphError",
    "IssueRecord",
    "IssueSource",
    "IssueStatus",
    "JiraIssueSource",
    "MissingFieldError",
    "TraversalEngine",
    "TraversalResult",
    "load_config",
    "__version__",
]
