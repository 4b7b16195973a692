"""NPM dependency installation and builds for cloned servers."""

import logging
from pathlib import Path

from ..config.models import ServerDefinition
from .base import BaseInstaller, InstallationError

logger = logging.getLogger(__name__)


class NPMBuilder(BaseInstaller):
    """Installs dependencies and compiles a cloned Node.js server."""

    async def build(self, server: ServerDefinition) -> Path:
        """Install, build and verify one server; return its directory."""
        install_path = self.get_install_path(server)

        logger.info(f"Processing {server.display_name}...")

        if not install_path.exists():
            raise InstallationError(f"Server directory not found: {install_path}")

        if not (install_path / "package.json").exists():
            raise InstallationError(f"package.json not found in {install_path}")

        if server.install_command:
            logger.info(f"Installing dependencies for {server.display_name}")
            await self._run_command(server.install_command, cwd=install_path)

        if server.build_command and server.build_command.strip():
            logger.info(f"Building {server.display_name}")
            await self._run_command(server.build_command, cwd=install_path)
        else:
            logger.info(f"No build step required for {server.display_name}")

        self.verify(server)

        logger.info(f"{server.display_name} built successfully")
        return install_path

    def verify(self, server: ServerDefinition) -> None:
        """Check the expected build output exists."""
        install_path = self.get_install_path(server)
        for name in server.check_files:
            if not (install_path / name).exists():
                raise InstallationError(
                    f"Build verification failed: {name} not found for "
                    f"{server.display_name}"
                )
        logger.debug(f"Build verification passed for {server.display_name}")
