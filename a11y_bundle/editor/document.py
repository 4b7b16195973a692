"""Read, merge and write the editor's MCP server configuration document.

The document (VS Code's user ``mcp.json``) is shared with other tools. Only
the entries named by the caller are ever added, replaced or removed; every
other key of ``servers``, the ``inputs`` list and any unknown top-level key
is passed through untouched.

A document that cannot be parsed never blocks a run: the broken file is
copied to ``<path>.backup.<epoch-millis>`` and a fresh document is used.
"""

import json
import logging
import shutil
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Literal, Tuple

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError

logger = logging.getLogger(__name__)


class DocumentError(Exception):
    """Raised when the document cannot be read or written."""

    def __init__(self, path: Path, message: str):
        super().__init__(f"{message} ({path})")
        self.path = path


class ManagedEntry(BaseModel):
    """A server registration owned by this tool."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    transport: Literal["stdio"] = Field(default="stdio", alias="type")
    command: str
    args: List[str] = Field(default_factory=list)

    def to_config(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class MCPConfigDocument(BaseModel):
    """The persisted editor document.

    ``inputs`` belongs to the editor and is carried through whatever its
    shape. Top-level keys are written back in the order they were read.
    """

    model_config = ConfigDict(extra="allow")

    inputs: Any = Field(default_factory=list)
    servers: Dict[str, Any] = Field(default_factory=dict)

    _key_order: List[str] = PrivateAttr(default_factory=list)

    def to_json(self) -> Dict[str, Any]:
        data = self.model_dump()
        order = [key for key in self._key_order if key in data]
        order += [key for key in data if key not in order]
        return {key: data[key] for key in order}


@dataclass
class OverlayPlan:
    """Which names an overlay adds, replaces and leaves alone."""

    added: List[str] = field(default_factory=list)
    updated: List[str] = field(default_factory=list)
    preserved: List[str] = field(default_factory=list)


def _backup_path(path: Path) -> Path:
    millis = int(time.time() * 1000)
    backup = path.with_name(f"{path.name}.backup.{millis}")
    counter = 1
    while backup.exists():
        backup = path.with_name(f"{path.name}.backup.{millis}.{counter}")
        counter += 1
    return backup


def _parse(raw: str) -> MCPConfigDocument:
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError("top-level JSON value is not an object")
    key_order = list(data)
    # Explicit nulls count as missing.
    for key in ("inputs", "servers"):
        if key in data and data[key] is None:
            del data[key]
    doc = MCPConfigDocument.model_validate(data)
    doc._key_order = key_order
    return doc


def load_document(path: Path) -> MCPConfigDocument:
    """Load the document, recovering from a missing or corrupt file."""
    path = Path(path)

    if not path.exists():
        logger.info(f"Creating new MCP configuration at {path}")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DocumentError(path.resolve(), f"Cannot create directory: {e}")
        return MCPConfigDocument()

    logger.debug(f"Reading existing MCP configuration from {path}")
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise DocumentError(path.resolve(), f"Cannot read configuration: {e}")

    try:
        return _parse(raw.decode("utf-8"))
    except (ValueError, ValidationError) as e:
        backup = _backup_path(path)
        try:
            shutil.copyfile(path, backup)
        except OSError as copy_error:
            raise DocumentError(
                path.resolve(), f"Cannot back up malformed configuration: {copy_error}"
            )
        logger.warning(f"Invalid JSON in {path} ({e}), starting from an empty config")
        logger.warning(f"Backed up malformed file to: {backup}")
        return MCPConfigDocument()


def plan_overlay(
    doc: MCPConfigDocument, entries: Dict[str, ManagedEntry]
) -> OverlayPlan:
    plan = OverlayPlan()
    for name in entries:
        if name in doc.servers:
            plan.updated.append(name)
        else:
            plan.added.append(name)
    plan.preserved = [name for name in doc.servers if name not in entries]
    return plan


def apply_overlay(
    doc: MCPConfigDocument, entries: Dict[str, ManagedEntry]
) -> MCPConfigDocument:
    """Set every managed entry, replacing any previous value for its name."""
    for name, entry in entries.items():
        doc.servers[name] = entry.to_config()
    return doc


def remove_managed(
    doc: MCPConfigDocument, names: Iterable[str]
) -> Tuple[MCPConfigDocument, int]:
    """Delete the managed names that are present; absent names are skipped."""
    removed_count = 0
    for name in names:
        if name in doc.servers:
            del doc.servers[name]
            removed_count += 1
            logger.info(f"Removed: {name}")
        else:
            logger.debug(f"Not configured, nothing to remove: {name}")
    return doc, removed_count


def save_document(path: Path, doc: MCPConfigDocument) -> None:
    """Overwrite the document in full, tab-indented."""
    path = Path(path)
    try:
        path.write_text(json.dumps(doc.to_json(), indent="\t"), encoding="utf-8")
    except OSError as e:
        raise DocumentError(path.resolve(), f"Cannot write configuration: {e}")
    logger.debug(f"Wrote MCP configuration to {path}")
