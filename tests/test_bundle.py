"""Tests for BundleManager: install, update, uninstall and status."""

import asyncio
import json
from pathlib import Path

import pytest

from a11y_bundle.core.manager import BundleManager
from a11y_bundle.installers import CommandResult, InstallationError, UpdateOutcome
from a11y_bundle.server.health import HealthResult, HealthStatus
from conftest import FakeRunner, simulate_toolchain


async def no_health(stdio=False):
    return [HealthResult("AxeCore MCP", HealthStatus.UNHEALTHY, "not running")]


def make_manager(settings, runner, confirm=None):
    manager = BundleManager(settings, runner=runner, confirm=confirm)
    manager.health_check = no_health
    return manager


def mcp_config(settings):
    return json.loads(Path(settings.editor.mcp_config_path).read_text())


class TestInstallAll:
    def test_complete_install(self, settings, toolchain_runner):
        manager = make_manager(settings, toolchain_runner)

        result = asyncio.run(manager.install_all())

        assert result.ok
        assert len(result.completed) == 4
        assert set(mcp_config(settings)["servers"]) == set(manager.managed_names)
        assert manager.prompt.is_installed()
        assert manager.status().ok

    def test_unhealthy_servers_do_not_fail_install(self, settings, toolchain_runner):
        result = asyncio.run(make_manager(settings, toolchain_runner).install_all())
        assert result.ok
        assert not result.health[0].healthy

    def test_stops_at_failed_build(self, settings):
        def handler(cmd, cwd):
            if cmd == ["npm", "run", "build"] and cwd.name == "axecore-mcp-server":
                return CommandResult(cmd, 1, stderr="build broke")
            return simulate_toolchain(cmd, cwd)

        manager = make_manager(settings, FakeRunner(handler))
        result = asyncio.run(manager.install_all())

        assert not result.ok
        assert result.failed_step == "Building MCP servers"
        assert "AxeCore MCP" in result.error
        assert result.completed == ["Cloning MCP server repositories"]
        assert not manager.registry.config_path.exists()

    def test_stops_at_failed_clone(self, settings):
        runner = FakeRunner(lambda cmd, cwd: CommandResult(cmd, 128, stderr="offline"))
        result = asyncio.run(make_manager(settings, runner).install_all())
        assert result.failed_step == "Cloning MCP server repositories"
        assert result.completed == []

    def test_missing_prompt_source(self, settings, toolchain_runner):
        settings.prompt_source.unlink()
        result = asyncio.run(make_manager(settings, toolchain_runner).install_all())
        assert result.failed_step == "Installing system prompt"
        assert "complete bundle" in result.error


class TestBuildAll:
    def test_continues_past_failures(self, settings):
        for server_id in ("a11y-personas-mcp", "axecore-mcp-server"):
            path = settings.servers_dir / server_id
            path.mkdir(parents=True)
            (path / "package.json").write_text("{}")
            (path / "main.js").write_text("// entry")

        manager = make_manager(settings, FakeRunner(simulate_toolchain))
        results = asyncio.run(manager.build_all())

        assert results == {
            "A11y Personas MCP": True,
            "AxeCore MCP": True,
            "ARC Issue Writer MCP": False,
        }


class TestUpdateAll:
    def test_requires_setup(self, settings, fake_runner):
        with pytest.raises(InstallationError, match="Run setup first"):
            asyncio.run(make_manager(settings, fake_runner).update_all())

    def test_failure_is_recorded(self, settings):
        asyncio.run(make_manager(settings, FakeRunner(simulate_toolchain)).setup())

        def handler(cmd, cwd):
            if cmd == ["git", "fetch", "origin"] and cwd.name == "axecore-mcp-server":
                return CommandResult(cmd, 1, stderr="network down")
            if cmd[:2] == ["git", "rev-list"]:
                return CommandResult(cmd, 0, stdout="0\n")
            return None

        outcomes = asyncio.run(make_manager(settings, FakeRunner(handler)).update_all())

        assert outcomes == {
            "A11y Personas MCP": UpdateOutcome.UP_TO_DATE,
            "AxeCore MCP": None,
            "ARC Issue Writer MCP": UpdateOutcome.UP_TO_DATE,
        }


class TestUninstall:
    def installed(self, settings, confirm=None):
        manager = make_manager(settings, FakeRunner(simulate_toolchain), confirm)
        asyncio.run(manager.install_all())
        return manager

    def test_declined_by_default(self, settings):
        manager = self.installed(settings)
        assert manager.uninstall() is False
        assert settings.servers_dir.exists()
        assert manager.prompt.is_installed()

    def test_confirmed(self, settings):
        questions = []

        def confirm(question):
            questions.append(question)
            return True

        manager = self.installed(settings, confirm)
        config = manager.registry.config_path
        data = mcp_config(settings)
        data["servers"]["Other"] = {"command": "x"}
        config.write_text(json.dumps(data))

        assert manager.uninstall() is True

        assert len(questions) == 1
        assert mcp_config(settings)["servers"] == {"Other": {"command": "x"}}
        assert not manager.prompt.is_installed()
        assert not settings.servers_dir.exists()

    def test_assume_yes_skips_confirmation(self, settings):
        def confirm(question):
            raise AssertionError("should not ask")

        manager = self.installed(settings, confirm)
        assert manager.uninstall(assume_yes=True) is True
        assert not settings.servers_dir.exists()

    def test_nothing_installed(self, settings, fake_runner):
        manager = make_manager(settings, fake_runner)
        assert manager.uninstall(assume_yes=True) is True
        assert not manager.registry.config_path.exists()


class TestStatus:
    def test_fresh_checkout(self, settings, fake_runner):
        report = make_manager(settings, fake_runner).status()

        assert not report.ok
        assert "VS Code MCP configuration file missing" in report.issues
        assert "System prompt not installed" in report.issues
        assert "MCP server not configured: AxeCore MCP" in report.issues
        assert any(issue.startswith("Missing: ") for issue in report.issues)
        fixes = report.recommended_fixes()
        assert fixes[0].startswith("a11y-bundle setup")
        assert fixes[-1].startswith("a11y-bundle install-all")

    def test_registered_only(self, settings, fake_runner):
        manager = make_manager(settings, fake_runner)
        manager.register()

        report = manager.status()

        assert all(report.registered.values())
        assert not any(report.server_files.values())
        assert not any("not configured" in issue for issue in report.issues)
