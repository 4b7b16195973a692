"""Editor (VS Code) integration."""

from .document import (
    DocumentError,
    ManagedEntry,
    MCPConfigDocument,
    apply_overlay,
    load_document,
    remove_managed,
    save_document,
)
from .prompt import PromptError, SystemPromptInstaller
from .registry import EditorRegistry

__all__ = [
    "DocumentError",
    "EditorRegistry",
    "MCPConfigDocument",
    "ManagedEntry",
    "PromptError",
    "SystemPromptInstaller",
    "apply_overlay",
    "load_document",
    "remove_managed",
    "save_document",
]
