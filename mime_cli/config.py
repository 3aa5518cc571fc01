"""Configuration management for the mime CLI."""

import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional


def default_config_path() -> Path:
    """Config location, overridable through MIME_CONFIG."""
    override = os.environ.get("MIME_CONFIG")
    if override:
        return Path(override)
    return Path.home() / '.mime' / 'config.json'


class Config:
    """Manages CLI configuration stored in JSON file."""

    DEFAULT_CONFIG = {
        "registry_host": os.environ.get("MIME_REGISTRY_HOST", "localhost"),
        "registry_port": int(os.environ.get("MIME_REGISTRY_PORT", "4180")),
        "timeout": 30,
        "index_volume": "boot",
        "log_level": "WARNING",
    }

    def __init__(self, config_path: Path):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.mime/config.json)
        """
        self.config_path = config_path
        self.data = self._load()

    def _load(self) -> dict:
        """
        Load configuration from file, creating defaults if necessary.

        Returns:
            Configuration dictionary
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            self.config_path = Path(tempfile.gettempdir()) / '.mime' / 'config.json'
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = json.load(f)
                if not isinstance(data, dict):
                    raise ValueError("config root must be an object")
                config = self.DEFAULT_CONFIG.copy()
                config.update(data)
                return config
            except (json.JSONDecodeError, ValueError, IOError):
                backup_path = self.config_path.with_suffix('.json.bak')
                try:
                    shutil.copy(self.config_path, backup_path)
                except IOError:
                    pass
                return self.DEFAULT_CONFIG.copy()
        else:
            config = self.DEFAULT_CONFIG.copy()
            try:
                with open(self.config_path, 'w') as f:
                    json.dump(config, f, indent=2)
            except IOError:
                pass
            return config

    def save(self) -> None:
        """Save current configuration to file."""
        try:
            with open(self.config_path, 'w') as f:
                json.dump(self.data, f, indent=2)
        except IOError:
            pass

    def get_base_url(self) -> str:
        """
        Get registry service base URL.

        Returns:
            Base URL string (e.g., "http://localhost:4180")
        """
        host = self.data.get('registry_host', 'localhost')
        port = self.data.get('registry_port', 4180)
        return f"http://{host}:{port}"

    def get_timeout(self) -> float:
        """
        Get request timeout in seconds.

        Returns:
            Timeout value in seconds
        """
        return self.data.get('timeout', 30)

    def get_index_volume(self) -> str:
        """Volume on which attribute indexes are maintained."""
        return self.data.get('index_volume', 'boot')

    def get_log_level(self) -> Optional[str]:
        return self.data.get('log_level')
