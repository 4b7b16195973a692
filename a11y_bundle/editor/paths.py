"""Per-user VS Code locations."""

import os
import sys
from pathlib import Path


def is_windows() -> bool:
    return os.name == "nt"


def is_macos() -> bool:
    return sys.platform == "darwin"


def vscode_user_dir() -> Path:
    """Return the VS Code ``User`` directory for the current platform.

    - macOS: ~/Library/Application Support/Code/User
    - Windows: %APPDATA%/Code/User (fallback to ~/AppData/Roaming/Code/User)
    - Linux: $XDG_CONFIG_HOME/Code/User or ~/.config/Code/User
    """
    if is_macos():
        return Path.home() / "Library" / "Application Support" / "Code" / "User"
    if is_windows():
        appdata = os.environ.get("APPDATA")
        base = Path(appdata) if appdata else Path.home() / "AppData" / "Roaming"
        return base / "Code" / "User"
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg).expanduser() if xdg else Path.home() / ".config"
    return base / "Code" / "User"


def vscode_mcp_file() -> Path:
    return vscode_user_dir() / "mcp.json"


def vscode_prompts_dir() -> Path:
    return vscode_user_dir() / "prompts"
