"""Installation status report."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from ..config.bundle import managed_names
from ..config.models import ServerDefinition
from ..editor.prompt import SystemPromptInstaller
from ..editor.registry import EditorRegistry

logger = logging.getLogger(__name__)


@dataclass
class InstallationReport:
    server_files: Dict[str, bool] = field(default_factory=dict)
    registered: Dict[str, bool] = field(default_factory=dict)
    prompt_installed: bool = False
    config_path: Optional[Path] = None
    issues: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues

    def recommended_fixes(self) -> List[str]:
        fixes = []
        if any(not present for present in self.server_files.values()):
            fixes.append("a11y-bundle setup           # Clone and build MCP servers")
        if any(not present for present in self.registered.values()):
            fixes.append("a11y-bundle register        # Register servers with VS Code")
        if not self.prompt_installed:
            fixes.append("a11y-bundle install-prompt  # Install system prompt")
        if fixes:
            fixes.append("a11y-bundle install-all     # Or run the complete installation")
        return fixes


def check_installation(
    servers: List[ServerDefinition],
    servers_dir: Path,
    registry: EditorRegistry,
    prompt: SystemPromptInstaller,
) -> InstallationReport:
    """Check files on disk, editor registration and the prompt file."""
    report = InstallationReport(config_path=registry.config_path)

    for server in servers:
        entry = Path(servers_dir) / server.id / server.entry_point
        present = entry.exists()
        report.server_files[server.display_name] = present
        if not present:
            report.issues.append(f"Missing: {entry}")

    if not registry.config_path.exists():
        report.issues.append("VS Code MCP configuration file missing")
    report.registered = registry.registered(managed_names(servers))
    for name, configured in report.registered.items():
        if not configured:
            report.issues.append(f"MCP server not configured: {name}")

    report.prompt_installed = prompt.is_installed()
    if not report.prompt_installed:
        report.issues.append("System prompt not installed")

    logger.debug(f"Installation check found {len(report.issues)} issue(s)")
    return report
