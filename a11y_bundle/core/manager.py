"""Bundle lifecycle: install, update, status and uninstall."""

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from ..config.bundle import managed_entries, managed_names, resolve_servers
from ..config.models import BundleSettings
from ..editor.document import DocumentError
from ..editor.paths import vscode_mcp_file, vscode_prompts_dir
from ..editor.prompt import PromptError, SystemPromptInstaller
from ..editor.registry import EditorRegistry, RegistrationResult
from ..installers.base import InstallationError
from ..installers.git import GitInstaller, UpdateOutcome
from ..installers.npm import NPMBuilder
from ..installers.runner import CommandRunner, SubprocessRunner
from ..server.health import HealthResult, check_all, check_stdio
from .status import InstallationReport, check_installation

logger = logging.getLogger(__name__)

ConfirmFn = Callable[[str], bool]


@dataclass
class InstallResult:
    completed: List[str] = field(default_factory=list)
    failed_step: Optional[str] = None
    error: Optional[str] = None
    health: List[HealthResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failed_step is None


def _deny(question: str) -> bool:
    return False


class BundleManager:
    """Drives every bundle operation against one set of settings."""

    def __init__(
        self,
        settings: BundleSettings,
        runner: Optional[CommandRunner] = None,
        confirm: Optional[ConfirmFn] = None,
    ):
        self.settings = settings
        self.servers = resolve_servers(settings)
        self.runner = runner or SubprocessRunner()
        # Destructive steps are declined unless a confirmation is wired in.
        self.confirm = confirm or _deny

        servers_dir = settings.servers_dir
        self.builder = NPMBuilder(self.runner, servers_dir)
        self.git = GitInstaller(self.runner, servers_dir, builder=self.builder)
        self.registry = EditorRegistry(self._mcp_config_path())
        self.prompt = SystemPromptInstaller(
            settings.prompt_source, self._prompts_dir(), settings.prompt.filename
        )

    def _mcp_config_path(self) -> Path:
        override = self.settings.editor.mcp_config_path
        return Path(override).expanduser() if override else vscode_mcp_file()

    def _prompts_dir(self) -> Path:
        override = self.settings.editor.prompts_dir
        return Path(override).expanduser() if override else vscode_prompts_dir()

    @property
    def managed_names(self) -> List[str]:
        return managed_names(self.servers)

    def managed_entries(self):
        return managed_entries(self.servers, self.settings.servers_dir)

    async def clone_all(self) -> None:
        logger.info("Cloning accessibility testing MCP server repositories...")
        for server in self.servers:
            await self.git.clone(server)
        logger.info("All repositories cloned/updated successfully")

    async def build_all(self) -> Dict[str, bool]:
        """Build every server, continuing past failures."""
        logger.info("Starting MCP servers build process...")
        results = {}
        for server in self.servers:
            try:
                await self.builder.build(server)
                results[server.display_name] = True
            except InstallationError as e:
                logger.error(f"Failed to build {server.display_name}: {e}")
                results[server.display_name] = False

        failed = [name for name, ok in results.items() if not ok]
        logger.info(
            f"Build summary: {len(results) - len(failed)} succeeded, {len(failed)} failed"
        )
        return results

    async def setup(self) -> Dict[str, bool]:
        await self.clone_all()
        return await self.build_all()

    def register(self) -> RegistrationResult:
        return self.registry.register(self.managed_entries())

    def unregister(self) -> int:
        return self.registry.unregister(self.managed_names)

    def install_prompt(self) -> Path:
        return self.prompt.install()

    async def health_check(self, stdio: bool = False) -> List[HealthResult]:
        timeout = self.settings.runtime.health_check_timeout
        if not stdio:
            return await check_all(self.servers, timeout=timeout)

        results = []
        for name, entry in self.managed_entries().items():
            results.append(await check_stdio(name, entry, timeout=timeout))
        return results

    async def update_all(self) -> Dict[str, Optional[UpdateOutcome]]:
        """Update every server; a failure is recorded as None."""
        if not self.settings.servers_dir.exists():
            raise InstallationError(
                f"Servers directory not found: {self.settings.servers_dir}. "
                "Run setup first."
            )

        logger.info("Updating MCP server repositories...")
        outcomes: Dict[str, Optional[UpdateOutcome]] = {}
        for server in self.servers:
            try:
                outcomes[server.display_name] = await self.git.update(server)
            except InstallationError as e:
                logger.error(f"Failed to update {server.display_name}: {e}")
                logger.info("Continuing with other servers...")
                outcomes[server.display_name] = None
        return outcomes

    async def install_all(self) -> InstallResult:
        """Clone, build, register and install the prompt, then health-check.

        Stops at the first failing step. The health check only reports: the
        servers speak stdio and need not listen on their ports.
        """
        result = InstallResult()

        async def build() -> None:
            failed = [name for name, ok in (await self.build_all()).items() if not ok]
            if failed:
                raise InstallationError(f"Failed to build: {', '.join(failed)}")

        async def register() -> None:
            self.register()

        async def install_prompt() -> None:
            self.install_prompt()

        steps = [
            ("Cloning MCP server repositories", self.clone_all),
            ("Building MCP servers", build),
            ("Registering MCP servers with VS Code", register),
            ("Installing system prompt", install_prompt),
        ]

        for description, step in steps:
            logger.info(f"Running {description}...")
            try:
                await step()
            except (InstallationError, DocumentError, PromptError) as e:
                logger.error(f"{description} failed: {e}")
                result.failed_step = description
                result.error = str(e)
                return result
            result.completed.append(description)

        result.health = await self.health_check()
        return result

    def uninstall(self, assume_yes: bool = False) -> bool:
        """Remove registration, prompt and cloned servers after confirmation."""
        if not assume_yes and not self.confirm(
            "Remove the MCP servers from VS Code, the system prompt "
            "and the cloned server files?"
        ):
            logger.info("Uninstall cancelled")
            return False

        try:
            self.unregister()
        except DocumentError as e:
            logger.error(f"Failed to update MCP configuration: {e}")

        try:
            self.prompt.remove()
        except PromptError as e:
            logger.error(str(e))

        servers_dir = self.settings.servers_dir
        if servers_dir.exists():
            logger.info("Removing cloned MCP server files...")
            try:
                shutil.rmtree(servers_dir)
                logger.info("MCP server files removed")
            except OSError as e:
                logger.error(f"Failed to remove server files: {e}")
        else:
            logger.info("No server files found to remove")

        return True

    def status(self) -> InstallationReport:
        return check_installation(
            self.servers, self.settings.servers_dir, self.registry, self.prompt
        )
