"""Base installer interface."""

import logging
import shlex
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..config.models import ServerDefinition
from .runner import CommandResult, CommandRunner

logger = logging.getLogger(__name__)


class InstallationError(Exception):
    """Raised when installation fails."""

    pass


class BaseInstaller:
    """Shared plumbing for the bundle installers."""

    def __init__(self, runner: CommandRunner, servers_dir: Path):
        self.runner = runner
        self.servers_dir = Path(servers_dir)

    def get_install_path(self, server: ServerDefinition) -> Path:
        """Get the checkout directory for a server."""
        return self.servers_dir / server.id

    def is_installed(self, server: ServerDefinition) -> bool:
        """Check if the server repository is cloned."""
        return (self.get_install_path(server) / ".git").exists()

    async def _run_command(
        self,
        cmd: Union[str, List[str]],
        cwd: Optional[Path] = None,
        env: Optional[Dict[str, str]] = None,
    ) -> CommandResult:
        """Run a command and raise InstallationError if it fails."""
        if isinstance(cmd, str):
            cmd = shlex.split(cmd)

        logger.info(f"Running: {' '.join(cmd)}")
        result = await self.runner.run(cmd, cwd=cwd, env=env)

        if not result.ok:
            error_msg = (
                f"Command failed: {' '.join(cmd)}\n"
                f"Stdout: {result.stdout}\nStderr: {result.stderr}"
            )
            logger.error(error_msg)
            raise InstallationError(error_msg)

        return result
