"""Configuration system for the a11y testing bundle."""

from .bundle import BUNDLE_SERVERS, managed_entries, managed_names, resolve_servers
from .manager import ConfigManager
from .models import BundleSettings, ServerDefinition

__all__ = [
    "BUNDLE_SERVERS",
    "BundleSettings",
    "ConfigManager",
    "ServerDefinition",
    "managed_entries",
    "managed_names",
    "resolve_servers",
]
