"""The servers shipped by the bundle.

Everything that names a bundle server (cloning, building, registration,
removal, status) derives from ``BUNDLE_SERVERS`` so the install and
uninstall paths can never disagree on the managed names.
"""

from pathlib import Path
from typing import Dict, List

from ..editor.document import ManagedEntry
from .models import BundleSettings, ServerDefinition

# Placeholder location; point each server at its real repository through
# ``repositories.<id>.git_url`` in a11y-bundle.yaml.
DEFAULT_REPOSITORY_ORG = "https://github.com/a11y-testing-bundle"

BUNDLE_SERVERS: List[ServerDefinition] = [
    ServerDefinition(
        id="a11y-personas-mcp",
        display_name="A11y Personas MCP",
        git_url=f"{DEFAULT_REPOSITORY_ORG}/a11y-personas-mcp.git",
        build_command=None,  # runs main.js directly
        entry_point="main.js",
        check_files=["main.js"],
        port=3001,
    ),
    ServerDefinition(
        id="axecore-mcp-server",
        display_name="AxeCore MCP",
        git_url=f"{DEFAULT_REPOSITORY_ORG}/axecore-mcp-server.git",
        build_command="npm run build",
        entry_point="build/index.js",
        check_files=["build/index.js"],
        port=3002,
    ),
    ServerDefinition(
        id="accessibility-issues-template-mcp",
        display_name="ARC Issue Writer MCP",
        git_url=f"{DEFAULT_REPOSITORY_ORG}/accessibility-issues-template-mcp.git",
        build_command="npm run build",
        entry_point="dist/index.js",
        check_files=["dist/index.js"],
        port=3003,
    ),
]


def resolve_servers(settings: BundleSettings) -> List[ServerDefinition]:
    """Return the bundle servers with repository overrides applied."""
    servers = []
    for server in BUNDLE_SERVERS:
        override = settings.repositories.get(server.id)
        if override is None:
            servers.append(server)
            continue
        changes = override.model_dump(exclude_none=True)
        servers.append(server.model_copy(update=changes))
    return servers


def managed_names(servers: List[ServerDefinition] = BUNDLE_SERVERS) -> List[str]:
    return [server.display_name for server in servers]


def managed_entries(
    servers: List[ServerDefinition], servers_dir: Path
) -> Dict[str, ManagedEntry]:
    """Build the editor entries for each server, keyed by display name."""
    entries = {}
    for server in servers:
        entry_path = (servers_dir / server.id / server.entry_point).resolve()
        entries[server.display_name] = ManagedEntry(
            command="node", args=[str(entry_path)]
        )
    return entries


def uses_default_repository(server: ServerDefinition) -> bool:
    return server.git_url.startswith(f"{DEFAULT_REPOSITORY_ORG}/")
