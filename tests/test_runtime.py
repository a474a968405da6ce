from __future__ import annotations

import argparse
from pathlib import Path

import pytest

from issuegraph.config import GraphConfig
from issuegraph.errors import ConfigurationError
from issuegraph.runtime import apply_overrides, execute_command, prepare_config


def _ns(**kwargs) -> argparse.Namespace:
    return argparse.Namespace(**kwargs)


def test_apply_overrides_merges_cli_values():
    cfg = GraphConfig(stop_issues=["S-1"], edge_annotations={"X": "[a]"})
    args = _ns(
        root="PROJ-1",
        base_url="https://cli.example.com",
        user="bob",
        password="pw",
        insecure=True,
        stop=["S-2", "S-1"],
        annotate=["Y=[minlen=2]"],
        link_type=["blocks"],
        cache=True,
        cache_dir="cache",
        output_dir="out",
        verbose=True,
        json_logs=True,
    )
    apply_overrides(cfg, args)

    assert cfg.root_issue == "PROJ-1"
    assert cfg.base_url == "https://cli.example.com"
    assert (cfg.username, cfg.password) == ("bob", "pw")
    assert cfg.verify_ssl is False
    assert cfg.stop_issues == ["S-1", "S-2"]
    assert cfg.edge_annotations == {"X": "[a]", "Y": "[minlen=2]"}
    assert cfg.link_types == ["blocks"]
    assert cfg.cache_enabled is True
    assert cfg.cache_dir == Path("cache")
    assert cfg.output_dir == Path("out")
    assert cfg.verbose and cfg.logging_json_enabled


def test_apply_overrides_keeps_file_values_when_unset():
    cfg = GraphConfig(root_issue="R-1", cache_enabled=True, link_types=["depends on"])
    apply_overrides(cfg, _ns(cache=None, stop=[], annotate=[], link_type=[]))
    assert cfg.root_issue == "R-1"
    assert cfg.cache_enabled is True
    assert cfg.link_types == ["depends on"]


def test_apply_overrides_rejects_bad_annotation():
    with pytest.raises(ConfigurationError):
        apply_overrides(GraphConfig(), _ns(annotate=["nonsense"]))


def test_prepare_config_uses_loader_for_explicit_path():
    seen: list[str] = []

    def loader(path):
        seen.append(str(path))
        return GraphConfig(root_issue="FROM-FILE")

    cfg = prepare_config(_ns(config="custom.yaml", root=None), loader=loader)
    assert seen == ["custom.yaml"]
    assert cfg.root_issue == "FROM-FILE"


def test_prepare_config_without_file_uses_environment(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("ISSUEGRAPH_JIRA_URL", "https://env.example.com")
    cfg = prepare_config(_ns(config=None, root="PROJ-1"))
    assert cfg.base_url == "https://env.example.com"
    assert cfg.root_issue == "PROJ-1"


def test_execute_command_returns_handler_code():
    assert execute_command(lambda: 3, GraphConfig(), "render") == 3
    assert execute_command(lambda: None, None, "render") == 0


def test_execute_command_propagates_errors():
    def boom():
        raise ConfigurationError("bad")

    with pytest.raises(ConfigurationError):
        execute_command(boom, GraphConfig(root_issue="A"), "render")
