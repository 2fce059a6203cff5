"""
Unit tests: command line interface
"""

import json

import pytest
import yaml
from click.testing import CliRunner

from flowkeeper.cli import cli


@pytest.fixture
def runner(monkeypatch):
    for name in (
        "LOG_LEVEL",
        "LOG_FORMAT",
        "USE_STRUCTLOG",
        "STORE_PATH",
        "STORAGE_KEY",
        "DEBOUNCE_MS",
        "MIN_SAVING_MS",
        "SAVED_DISPLAY_MS",
    ):
        monkeypatch.delenv(f"FLOWKEEPER_{name}", raising=False)
    return CliRunner()


@pytest.fixture
def graph_file(tmp_path, valid_graph):
    nodes, edges = valid_graph
    path = tmp_path / "graph.yaml"
    path.write_text(yaml.safe_dump({"nodes": nodes, "edges": edges}), encoding="utf-8")
    return path


@pytest.fixture
def broken_graph_file(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "nodes": [
                    {"id": "s1", "type": "start"},
                    {"id": "f1", "type": "form", "data": {"customName": "ab"}},
                ],
                "edges": [{"source": "s1", "target": "f1"}],
            }
        ),
        encoding="utf-8",
    )
    return path


class TestValidateCommand:
    def test_valid(self, runner, graph_file):
        result = runner.invoke(cli, ["validate", str(graph_file)])
        assert result.exit_code == 0
        assert "Graph is valid" in result.output
        assert "Nodes: 3" in result.output
        assert "Edges: 2" in result.output

    def test_invalid(self, runner, broken_graph_file):
        result = runner.invoke(cli, ["validate", str(broken_graph_file)])
        assert result.exit_code == 1
        assert "Workflow must have one End block" in result.output
        assert "[f1] customName: Form Name must have a minimum of 3 characters" in result.output

    def test_unknown_node_type(self, runner, tmp_path):
        path = tmp_path / "graph.yaml"
        path.write_text("nodes:\n  - {id: q, type: queue}\n", encoding="utf-8")
        result = runner.invoke(cli, ["validate", str(path)])
        assert result.exit_code == 1
        assert "Unknown node type: queue" in result.output


class TestShowCommand:
    def test_show(self, runner, graph_file):
        result = runner.invoke(cli, ["show", str(graph_file)])
        assert result.exit_code == 0
        assert "[form] f1" in result.output
        assert "name: Signup" in result.output
        assert "s1 -- f1" in result.output


class TestFieldCommand:
    def test_ok(self, runner):
        result = runner.invoke(cli, ["field", "url", "https://x.io", "--node-type", "api"])
        assert result.exit_code == 0
        assert "OK" in result.output

    def test_error(self, runner):
        result = runner.invoke(
            cli, ["field", "value", "", "--node-type", "conditional", "--operator", "equals"]
        )
        assert result.exit_code == 1
        assert "Value is required" in result.output


class TestSaveAndSnapshot:
    def test_save_then_show_then_clear(self, runner, graph_file, tmp_path):
        store = tmp_path / "store.json"

        result = runner.invoke(cli, ["save", str(graph_file), str(store)])
        assert result.exit_code == 0
        assert "idle -> saving" in result.output
        assert "saving -> saved" in result.output
        assert "Saved at" in result.output
        assert "workflow-autosave" in json.loads(store.read_text(encoding="utf-8"))

        result = runner.invoke(cli, ["snapshot", "show", str(store)])
        assert result.exit_code == 0
        assert "Nodes: 3" in result.output
        assert '"savedAt"' in result.output

        result = runner.invoke(cli, ["snapshot", "clear", str(store)])
        assert result.exit_code == 0
        assert "Cleared 'workflow-autosave'" in result.output

        result = runner.invoke(cli, ["snapshot", "show", str(store)])
        assert result.exit_code == 1
        assert "No snapshot stored" in result.output

    def test_save_custom_key(self, runner, graph_file, tmp_path):
        store = tmp_path / "store.json"
        result = runner.invoke(cli, ["save", str(graph_file), str(store), "--key", "draft"])
        assert result.exit_code == 0
        assert list(json.loads(store.read_text(encoding="utf-8"))) == ["draft"]

    def test_save_blocked(self, runner, broken_graph_file, tmp_path):
        store = tmp_path / "store.json"
        result = runner.invoke(cli, ["save", str(broken_graph_file), str(store)])

        assert result.exit_code == 1
        assert "idle -> error" in result.output
        assert "Not saved, graph has errors" in result.output
        assert not store.exists()


class TestGlobalOptions:
    def test_config_file(self, runner, graph_file, tmp_path):
        config = tmp_path / "flowkeeper.yaml"
        config.write_text("autosave:\n  storage_key: from-config\n", encoding="utf-8")
        store = tmp_path / "store.json"

        result = runner.invoke(cli, ["--config", str(config), "save", str(graph_file), str(store)])
        assert result.exit_code == 0
        assert list(json.loads(store.read_text(encoding="utf-8"))) == ["from-config"]

    def test_bad_log_level(self, runner, graph_file):
        result = runner.invoke(cli, ["--log-level", "LOUD", "validate", str(graph_file)])
        assert result.exit_code != 0
        assert "log_level must be one of" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output
