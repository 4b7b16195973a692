"""Registration of the bundle's servers in the editor configuration."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List

from .document import (
    ManagedEntry,
    OverlayPlan,
    apply_overlay,
    load_document,
    plan_overlay,
    remove_managed,
    save_document,
)

logger = logging.getLogger(__name__)


@dataclass
class RegistrationResult:
    config_path: Path
    plan: OverlayPlan
    registered: List[str]


class EditorRegistry:
    """Adds and removes managed entries in one editor ``mcp.json``."""

    def __init__(self, config_path: Path):
        self.config_path = Path(config_path)

    def register(self, entries: Dict[str, ManagedEntry]) -> RegistrationResult:
        """Overlay the managed entries onto the current document."""
        doc = load_document(self.config_path)

        plan = plan_overlay(doc, entries)
        if plan.updated:
            logger.info(f"Updating existing servers: {', '.join(plan.updated)}")
        if plan.added:
            logger.info(f"Adding new servers: {', '.join(plan.added)}")
        logger.info(
            f"Preserving existing servers: {', '.join(plan.preserved) or 'none'}"
        )

        apply_overlay(doc, entries)
        save_document(self.config_path, doc)

        logger.info(f"Configuration updated: {self.config_path}")
        return RegistrationResult(
            config_path=self.config_path, plan=plan, registered=list(entries)
        )

    def unregister(self, names: List[str]) -> int:
        """Remove the managed names and return how many were present."""
        if not self.config_path.exists():
            logger.info(f"No MCP configuration found at {self.config_path}")
            return 0

        doc = load_document(self.config_path)
        doc, removed_count = remove_managed(doc, names)

        if removed_count > 0:
            save_document(self.config_path, doc)
            logger.info(f"Removed {removed_count} MCP server(s) from {self.config_path}")
        else:
            logger.info("None of the bundle's MCP servers were configured")
        return removed_count

    def registered(self, names: List[str]) -> Dict[str, bool]:
        """Report which names are present, without modifying anything."""
        if not self.config_path.exists():
            return {name: False for name in names}

        try:
            data = json.loads(self.config_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Cannot read {self.config_path}: {e}")
            return {name: False for name in names}

        servers = data.get("servers") if isinstance(data, dict) else None
        if not isinstance(servers, dict):
            servers = {}
        return {name: name in servers for name in names}

    @staticmethod
    def manual_instructions(entries: Dict[str, ManagedEntry]) -> str:
        """JSON to paste into the ``servers`` section by hand."""
        return json.dumps(
            {name: entry.to_config() for name, entry in entries.items()}, indent=2
        )
