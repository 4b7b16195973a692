"""Tests for EditorRegistry: register, unregister, status reads."""

import json
import logging

from a11y_bundle.editor.document import ManagedEntry
from a11y_bundle.editor.registry import EditorRegistry

ENTRIES = {
    "A11y Personas MCP": ManagedEntry(command="node", args=["/b/servers/p/main.js"]),
    "AxeCore MCP": ManagedEntry(command="node", args=["/b/servers/a/build/index.js"]),
}
NAMES = list(ENTRIES)


def write_config(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))


class TestRegister:
    def test_creates_file(self, tmp_path):
        path = tmp_path / "User" / "mcp.json"
        result = EditorRegistry(path).register(ENTRIES)

        data = json.loads(path.read_text())
        assert set(data["servers"]) == set(NAMES)
        assert data["inputs"] == []
        assert result.plan.added == NAMES
        assert result.registered == NAMES

    def test_preserves_foreign_entries(self, tmp_path):
        path = tmp_path / "mcp.json"
        foreign = {"command": "uvx", "args": ["other"], "env": {"K": "V"}}
        write_config(path, {"inputs": [{"id": "x"}], "servers": {"Other": foreign}})

        result = EditorRegistry(path).register(ENTRIES)

        data = json.loads(path.read_text())
        assert data["servers"]["Other"] == foreign
        assert data["inputs"] == [{"id": "x"}]
        assert result.plan.preserved == ["Other"]

    def test_non_list_inputs_keep_foreign_servers(self, tmp_path):
        path = tmp_path / "mcp.json"
        foreign = {"command": "uvx", "args": ["other"]}
        write_config(path, {"inputs": {"legacy": True}, "servers": {"Other": foreign}})

        EditorRegistry(path).register(ENTRIES)

        data = json.loads(path.read_text())
        assert data["inputs"] == {"legacy": True}
        assert data["servers"]["Other"] == foreign
        assert set(data["servers"]) == {"Other", *NAMES}
        assert not list(tmp_path.glob("mcp.json.backup.*"))

    def test_rerun_updates_in_place(self, tmp_path):
        path = tmp_path / "mcp.json"
        registry = EditorRegistry(path)
        registry.register(ENTRIES)
        first = path.read_text()

        result = registry.register(ENTRIES)

        assert path.read_text() == first
        assert result.plan.updated == NAMES
        assert result.plan.added == []

    def test_logs_plan(self, tmp_path, caplog):
        path = tmp_path / "mcp.json"
        write_config(path, {"servers": {"Other": {}}})
        with caplog.at_level(logging.INFO):
            EditorRegistry(path).register(ENTRIES)
        assert "Adding new servers: A11y Personas MCP, AxeCore MCP" in caplog.text
        assert "Preserving existing servers: Other" in caplog.text

    def test_recovers_from_corrupt_file(self, tmp_path):
        path = tmp_path / "mcp.json"
        path.write_text("{ broken")

        EditorRegistry(path).register(ENTRIES)

        assert set(json.loads(path.read_text())["servers"]) == set(NAMES)
        backups = list(tmp_path.glob("mcp.json.backup.*"))
        assert [b.read_text() for b in backups] == ["{ broken"]


class TestUnregister:
    def test_missing_file_is_not_created(self, tmp_path):
        path = tmp_path / "mcp.json"
        assert EditorRegistry(path).unregister(NAMES) == 0
        assert not path.exists()

    def test_removes_only_managed(self, tmp_path):
        path = tmp_path / "mcp.json"
        registry = EditorRegistry(path)
        write_config(path, {"servers": {"Other": {"command": "x"}}})
        registry.register(ENTRIES)

        assert registry.unregister(NAMES) == 2
        assert json.loads(path.read_text())["servers"] == {"Other": {"command": "x"}}

    def test_second_run_removes_nothing(self, tmp_path):
        path = tmp_path / "mcp.json"
        registry = EditorRegistry(path)
        registry.register(ENTRIES)
        registry.unregister(NAMES)
        assert registry.unregister(NAMES) == 0

    def test_no_write_when_nothing_removed(self, tmp_path):
        path = tmp_path / "mcp.json"
        path.write_text('{"servers": {"Other": {}}}')
        EditorRegistry(path).unregister(NAMES)
        assert path.read_text() == '{"servers": {"Other": {}}}'


class TestRegistered:
    def test_reports_presence(self, tmp_path):
        path = tmp_path / "mcp.json"
        write_config(path, {"servers": {"AxeCore MCP": {}}})
        assert EditorRegistry(path).registered(NAMES) == {
            "A11y Personas MCP": False,
            "AxeCore MCP": True,
        }

    def test_missing_file(self, tmp_path):
        status = EditorRegistry(tmp_path / "mcp.json").registered(NAMES)
        assert not any(status.values())

    def test_corrupt_file_is_not_touched(self, tmp_path):
        path = tmp_path / "mcp.json"
        path.write_text("nope")
        status = EditorRegistry(path).registered(NAMES)
        assert not any(status.values())
        assert path.read_text() == "nope"
        assert not list(tmp_path.glob("mcp.json.backup.*"))


class TestManualInstructions:
    def test_lists_entries_as_json(self):
        text = EditorRegistry.manual_instructions(ENTRIES)
        assert json.loads(text)["AxeCore MCP"]["type"] == "stdio"
