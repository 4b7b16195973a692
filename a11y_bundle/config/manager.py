"""Configuration manager."""

import logging
import os
from collections import Counter
from pathlib import Path
from typing import Any, List, Optional

import yaml
from pydantic import ValidationError

from .bundle import BUNDLE_SERVERS, resolve_servers
from .models import BundleSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "a11y-bundle.yaml"


class ConfigManager:
    def __init__(self, config_path: str = DEFAULT_CONFIG_FILE):
        self.config_path = Path(config_path)
        self.config: Optional[BundleSettings] = None

    def load_config(self) -> BundleSettings:
        """Load and validate settings, falling back to defaults."""
        base_dir = self.config_path.resolve().parent

        if not self.config_path.exists():
            logger.debug(f"No settings file at {self.config_path}, using defaults")
            self.config = BundleSettings(base_dir=base_dir)
            return self.config

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f) or {}

            if not isinstance(config_data, dict):
                raise ValueError(
                    f"Expected a mapping at the top of {self.config_path}"
                )

            # Expand environment variables
            config_data = self._expand_env_vars(config_data)

            self.config = BundleSettings(**config_data, base_dir=base_dir)
            return self.config

        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML syntax: {e}")
        except ValidationError as e:
            raise ValueError(f"Configuration validation failed: {e}")

    def validate_config(self) -> List[str]:
        """Validate configuration and return any issues."""
        issues = []

        try:
            config = self.load_config()

            known_ids = {server.id for server in BUNDLE_SERVERS}
            for server_id in config.repositories:
                if server_id not in known_ids:
                    issues.append(f"Unknown server in repositories: {server_id}")

            ports = Counter(server.port for server in resolve_servers(config))
            for port, count in ports.items():
                if count > 1:
                    issues.append(f"Port {port} is assigned to {count} servers")

            if not config.prompt_source.exists():
                issues.append(f"System prompt not found: {config.prompt_source}")

        except Exception as e:
            issues.append(f"Configuration error: {e}")

        return issues

    def _expand_env_vars(self, data: Any) -> Any:
        """Recursively expand environment variables in configuration."""
        if isinstance(data, dict):
            return {k: self._expand_env_vars(v) for k, v in data.items()}
        elif isinstance(data, list):
            return [self._expand_env_vars(item) for item in data]
        elif isinstance(data, str) and data.startswith("${") and data.endswith("}"):
            env_var = data[2:-1]
            return os.getenv(env_var, data)
        else:
            return data

    def get_config(self) -> BundleSettings:
        """Get current configuration, loading if needed."""
        if self.config is None:
            self.load_config()
        return self.config
