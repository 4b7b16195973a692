"""System prompt installation."""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class PromptError(Exception):
    """Raised when the system prompt cannot be installed or removed."""

    pass


class SystemPromptInstaller:
    """Copies the bundle's prompt file into the editor's prompts directory."""

    def __init__(self, source: Path, prompts_dir: Path, filename: str):
        self.source = Path(source)
        self.prompts_dir = Path(prompts_dir)
        self.filename = filename

    @property
    def target(self) -> Path:
        return self.prompts_dir / self.filename

    def is_installed(self) -> bool:
        return self.target.exists()

    def install(self) -> Path:
        if not self.source.exists():
            raise PromptError(
                f"System prompt file not found: {self.source}. "
                "Make sure you have the complete bundle."
            )

        try:
            if not self.prompts_dir.exists():
                logger.info(f"Creating prompts directory: {self.prompts_dir}")
                self.prompts_dir.mkdir(parents=True, exist_ok=True)
            content = self.source.read_text(encoding="utf-8")
            self.target.write_text(content, encoding="utf-8")
        except PermissionError as e:
            raise PromptError(
                f"Permission denied writing {self.target}: {e}. "
                "Check directory permissions."
            ) from e
        except OSError as e:
            raise PromptError(f"Failed to install system prompt: {e}") from e

        logger.info(f"System prompt installed to: {self.target}")
        return self.target

    def remove(self) -> bool:
        """Delete the installed prompt; returns False when there was none."""
        if not self.target.exists():
            logger.info("No system prompt found to remove")
            return False

        try:
            self.target.unlink()
        except OSError as e:
            raise PromptError(f"Failed to remove system prompt: {e}") from e

        logger.info(f"System prompt removed: {self.target}")
        return True
