"""Git-based server checkout and update."""

import logging
from enum import Enum
from pathlib import Path
from typing import Optional

from ..config.bundle import uses_default_repository
from ..config.models import ServerDefinition
from .base import BaseInstaller, InstallationError
from .npm import NPMBuilder
from .runner import CommandRunner

logger = logging.getLogger(__name__)


class UpdateOutcome(Enum):
    MISSING = "missing"
    UP_TO_DATE = "up_to_date"
    UPDATED = "updated"


class GitInstaller(BaseInstaller):
    """Clones and updates the server repositories."""

    def __init__(
        self,
        runner: CommandRunner,
        servers_dir: Path,
        builder: Optional[NPMBuilder] = None,
    ):
        super().__init__(runner, servers_dir)
        self.builder = builder or NPMBuilder(runner, servers_dir)

    async def clone(self, server: ServerDefinition) -> Path:
        """Clone the repository, or pull it if it is already there."""
        install_path = self.get_install_path(server)

        if not self.servers_dir.exists():
            self.servers_dir.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created servers directory: {self.servers_dir}")

        if install_path.exists():
            logger.info(f"{server.display_name} already exists, updating...")
            await self._run_command(
                ["git", "pull", "origin", server.branch], cwd=install_path
            )
            logger.info(f"{server.display_name} updated")
            return install_path

        logger.info(f"Cloning {server.display_name} from {server.git_url}")
        clone_cmd = ["git", "clone", server.git_url, str(install_path)]
        if server.branch:
            clone_cmd.extend(["--branch", server.branch])
        try:
            await self._run_command(clone_cmd)
        except InstallationError as e:
            if not uses_default_repository(server):
                raise
            raise InstallationError(
                f"{e}\n{server.display_name} uses the placeholder repository "
                f"{server.git_url}. Set repositories.{server.id}.git_url "
                "in a11y-bundle.yaml."
            ) from e

        logger.info(f"{server.display_name} cloned successfully")
        return install_path

    async def commits_behind(self, server: ServerDefinition) -> Optional[int]:
        """Number of upstream commits not yet pulled, or None if unknown."""
        install_path = self.get_install_path(server)
        result = await self.runner.run(
            ["git", "rev-list", f"HEAD..origin/{server.branch}", "--count"],
            cwd=install_path,
        )
        if not result.ok:
            return None
        try:
            return int(result.stdout.strip())
        except ValueError:
            return None

    async def update(self, server: ServerDefinition) -> UpdateOutcome:
        """Fetch, and if upstream moved, pull, reinstall and rebuild."""
        install_path = self.get_install_path(server)

        if not install_path.exists():
            logger.warning(f"{server.display_name} not found, skipping...")
            return UpdateOutcome.MISSING

        logger.info(f"Updating {server.display_name}...")
        await self._run_command(["git", "fetch", "origin"], cwd=install_path)

        behind = await self.commits_behind(server)
        if behind == 0:
            logger.info(f"{server.display_name} is already up to date")
            return UpdateOutcome.UP_TO_DATE

        if behind is None:
            logger.info(
                f"Cannot compare with origin/{server.branch}, pulling anyway"
            )
        else:
            logger.info(f"{server.display_name} has {behind} new commits, updating...")

        await self._run_command(
            ["git", "pull", "origin", server.branch], cwd=install_path
        )

        try:
            await self.builder.build(server)
        except InstallationError:
            logger.error(f"Pulled {server.display_name} but the rebuild failed")
            raise

        logger.info(f"{server.display_name} updated successfully")
        return UpdateOutcome.UPDATED
