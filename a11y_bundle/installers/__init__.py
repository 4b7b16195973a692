"""Server checkout and build installers."""

from .base import BaseInstaller, InstallationError
from .git import GitInstaller, UpdateOutcome
from .npm import NPMBuilder
from .runner import CommandResult, CommandRunner, SubprocessRunner

__all__ = [
    "BaseInstaller",
    "CommandResult",
    "CommandRunner",
    "GitInstaller",
    "InstallationError",
    "NPMBuilder",
    "SubprocessRunner",
    "UpdateOutcome",
]
