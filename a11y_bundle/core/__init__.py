"""Core bundle application."""

from .manager import BundleManager, InstallResult
from .status import InstallationReport, check_installation

__all__ = ["BundleManager", "InstallResult", "InstallationReport", "check_installation"]
