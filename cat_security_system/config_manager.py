"""Configuration management with JSON file persistence."""

import json
import os
from dataclasses import asdict, fields
from typing import Optional, Dict, Any, Callable, List

from .config.defaults import DEFAULT_PATHS, IMAGE_SERVICES
from .logging_config import get_logger
from .models.config import SystemConfig
from .utils import ensure_directory_exists

logger = get_logger("config_manager")


class ConfigManager:
    """Manages system configuration with file persistence and change callbacks."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or DEFAULT_PATHS["config_file"]
        self._config: Optional[SystemConfig] = None
        self._config_change_callbacks: List[Callable[[SystemConfig], None]] = []

        self.load_config()

    def load_config(self) -> SystemConfig:
        """Load configuration from file or create default."""
        if os.path.exists(self.config_path):
            try:
                with open(self.config_path, 'r') as f:
                    config_dict = json.load(f)
                self._config = SystemConfig(**self._known_fields(config_dict))
            except (json.JSONDecodeError, TypeError, AttributeError) as e:
                logger.error(f"Error loading config: {e}. Using defaults.")
                self._config = SystemConfig()
        else:
            self._config = SystemConfig()
            self.save_config()

        return self._config

    def save_config(self) -> None:
        """Save current configuration to file."""
        if self._config is None:
            return

        directory = os.path.dirname(self.config_path)
        if directory:
            ensure_directory_exists(directory)

        with open(self.config_path, 'w') as f:
            json.dump(asdict(self._config), f, indent=2)

    def get_config(self) -> SystemConfig:
        """Get current configuration."""
        if self._config is None:
            return self.load_config()
        return self._config

    def update_config(self, **kwargs) -> None:
        """Update configuration with new values; unknown keys are ignored."""
        if self._config is None:
            self.load_config()

        for key, value in kwargs.items():
            if hasattr(self._config, key):
                setattr(self._config, key, value)
            else:
                logger.warning(f"Ignoring unknown config key: {key}")

        self.save_config()

        for callback in self._config_change_callbacks:
            try:
                callback(self._config)
            except Exception as e:
                logger.error(f"Error in config change callback: {e}")

    def validate_config(self) -> bool:
        """Validate current configuration."""
        if self._config is None:
            return False

        if not self._has_valid_types(self._config):
            return False

        if not 0.0 <= self._config.confidence_threshold <= 100.0:
            return False

        if self._config.image_service not in IMAGE_SERVICES:
            return False

        if not self._config.database_path:
            return False

        if self._config.log_level.upper() not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            return False

        if not 1 <= self._config.web_port <= 65535:
            return False

        return True

    def register_change_callback(self, callback: Callable[[SystemConfig], None]) -> None:
        """Register a callback to be called when config changes."""
        if callback not in self._config_change_callbacks:
            self._config_change_callbacks.append(callback)

    def unregister_change_callback(self, callback: Callable[[SystemConfig], None]) -> None:
        """Unregister a config change callback."""
        if callback in self._config_change_callbacks:
            self._config_change_callbacks.remove(callback)

    @staticmethod
    def _has_valid_types(config: SystemConfig) -> bool:
        """Check field types loaded from JSON before comparing values."""
        def is_number(value):
            return isinstance(value, (int, float)) and not isinstance(value, bool)

        if not is_number(config.confidence_threshold):
            logger.error(f"confidence_threshold must be a number, got {config.confidence_threshold!r}")
            return False

        if not isinstance(config.web_port, int) or isinstance(config.web_port, bool):
            logger.error(f"web_port must be an integer, got {config.web_port!r}")
            return False

        for name in ('image_service', 'cascade_path', 'database_path', 'log_level', 'log_dir', 'web_host'):
            value = getattr(config, name)
            if not isinstance(value, str):
                logger.error(f"{name} must be a string, got {value!r}")
                return False

        return True

    @staticmethod
    def _known_fields(config_dict: Dict[str, Any]) -> Dict[str, Any]:
        names = {f.name for f in fields(SystemConfig)}
        return {key: value for key, value in config_dict.items() if key in names}
