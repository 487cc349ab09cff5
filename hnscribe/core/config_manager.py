"""Thread-safe singleton configuration manager for HNScribe."""

import logging
import os
import threading
from pathlib import Path
from typing import Any

import yaml

from hnscribe.core.exceptions import ConfigError
from hnscribe.core.types import DEFAULT_TIMESTAMP_FORMAT, RenderOptions

logger = logging.getLogger("hnscribe")

CONFIG_ENV_VAR = "HNSCRIBE_CONFIG"

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# Default configuration template
DEFAULT_CONFIG = {
    "app": {
        "version": "1.0.0",
        "log_level": "INFO",
        "log_dir": "",                # empty = console only
    },
    "hn": {
        "api_base_url": "https://hacker-news.firebaseio.com/v0",
        "site_base_url": "https://news.ycombinator.com",
        "request_timeout": 30,
        "max_workers": 8,
        "indent_unit_px": 40,
    },
    "format": {
        "enhanced_links": False,
        "wrap_html_tags": True,
        "timestamp_format": DEFAULT_TIMESTAMP_FORMAT,
    },
    "notes": {
        "output_dir": "notes",
        "filename_template": "HN - {{title}} - {{date}}",
    },
    "security": {
        "mask_logs": False,
    },
}


class ConfigManager:
    """Thread-safe singleton configuration manager.

    Manages application configuration with:
    - Singleton pattern ensuring only one instance exists
    - Thread-safe operations using RLock
    - Automatic settings.yaml creation if missing
    - Dot-notation key access (e.g., "format.enhanced_links")
    - Validation rules for critical settings
    """

    _instance = None
    _lock = threading.RLock()

    def __new__(cls):
        """Ensure singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize configuration manager."""
        # Prevent re-initialization
        if hasattr(self, '_initialized'):
            return

        with self._lock:
            if hasattr(self, '_initialized'):
                return

            self.PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
            override = os.environ.get(CONFIG_ENV_VAR)
            if override:
                self.CONFIG_PATH = Path(override).expanduser().resolve()
            else:
                self.CONFIG_PATH = self.PROJECT_ROOT / "config" / "settings.yaml"

            self._config = {}
            self._instance_lock = threading.RLock()

            self._load_or_create_config()

            self._initialized = True

    def _load_or_create_config(self):
        """Load settings.yaml or create it from defaults."""
        if self.CONFIG_PATH.exists():
            try:
                with open(self.CONFIG_PATH, 'r', encoding='utf-8') as f:
                    self._config = yaml.safe_load(f) or {}
                logger.info(f"Loaded configuration from {self.CONFIG_PATH}")
            except yaml.YAMLError as e:
                logger.error(f"Failed to parse YAML at {self.CONFIG_PATH}: {e}")
                logger.warning("Using DEFAULT_CONFIG due to parse error")
                self._config = self._deep_copy(DEFAULT_CONFIG)
            except OSError as e:
                logger.error(f"Could not read config: {e}")
                logger.warning("Using DEFAULT_CONFIG")
                self._config = self._deep_copy(DEFAULT_CONFIG)
        else:
            logger.info(f"Config file not found at {self.CONFIG_PATH}")
            self._config = self._deep_copy(DEFAULT_CONFIG)
            self.save()
            logger.info(f"Created default configuration at {self.CONFIG_PATH}")

    def get(self, key: str, default=None) -> Any:
        """Get configuration value using dot-notation key.

        Falls back to DEFAULT_CONFIG when the loaded file lacks the key,
        then to `default`.

        Example:
            >>> config.get("hn.max_workers")
            8
        """
        with self._instance_lock:
            found, value = self._lookup(self._config, key)
            if found:
                return value
            found, value = self._lookup(DEFAULT_CONFIG, key)
            return value if found else default

    @staticmethod
    def _lookup(tree: dict, key: str) -> tuple[bool, Any]:
        value = tree
        for part in key.split('.'):
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                return False, None
        return True, value

    def set(self, key: str, value: Any) -> None:
        """Set configuration value using dot-notation key.

        Note: This does NOT save to disk. Use save() to persist changes.
        """
        with self._instance_lock:
            parts = key.split('.')
            target = self._config

            for part in parts[:-1]:
                if not isinstance(target.get(part), dict):
                    target[part] = {}
                target = target[part]

            target[parts[-1]] = value

    def update(self, changes: dict) -> None:
        """Batch update configuration from flat dict of dot-notation keys.

        Applies validation rules and saves to disk once after all updates.

        Validation Rules:
            - app.log_level: one of the logging level names
            - hn.request_timeout: minimum 5
            - hn.max_workers: clamped to 1-32
            - hn.indent_unit_px: minimum 1
            - notes.filename_template: must not be blank
        """
        with self._instance_lock:
            validated_changes = {}

            for key, value in changes.items():
                validated_value = self._validate_key_value(key, value)
                if validated_value is not None:
                    validated_changes[key] = validated_value

            for key, value in validated_changes.items():
                self.set(key, value)

            self.save()

    def _validate_key_value(self, key: str, value: Any) -> Any:
        """Apply validation rules to key-value pair.

        Returns:
            Validated value or None if invalid (will be ignored)
        """
        if key == "app.log_level":
            level = str(value).upper()
            if level not in VALID_LOG_LEVELS:
                logger.warning(f"Invalid log_level '{value}'. Ignoring.")
                return None
            return level

        if key == "hn.request_timeout":
            try:
                timeout = int(value)
            except (TypeError, ValueError):
                logger.warning(f"Invalid request_timeout '{value}'. Must be int. Ignoring.")
                return None
            if timeout < 5:
                logger.warning(f"request_timeout {timeout} < 5. Forcing to 5.")
                return 5
            return timeout

        if key == "hn.max_workers":
            try:
                workers = int(value)
            except (TypeError, ValueError):
                logger.warning(f"Invalid max_workers '{value}'. Must be int. Ignoring.")
                return None
            clamped = min(max(workers, 1), 32)
            if clamped != workers:
                logger.warning(f"max_workers {workers} out of range [1, 32]. Forcing to {clamped}.")
            return clamped

        if key == "hn.indent_unit_px":
            try:
                unit = int(value)
            except (TypeError, ValueError):
                logger.warning(f"Invalid indent_unit_px '{value}'. Must be int. Ignoring.")
                return None
            if unit < 1:
                logger.warning(f"indent_unit_px {unit} < 1. Ignoring.")
                return None
            return unit

        if key == "notes.filename_template":
            if not isinstance(value, str) or not value.strip():
                logger.warning("Blank filename_template. Ignoring.")
                return None
            return value

        return value

    def save(self) -> None:
        """Write current configuration to settings.yaml."""
        with self._instance_lock:
            try:
                self.CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
                with open(self.CONFIG_PATH, 'w', encoding='utf-8') as f:
                    yaml.safe_dump(self._config, f, default_flow_style=False, sort_keys=False)
                logger.debug(f"Saved configuration to {self.CONFIG_PATH}")
            except OSError as e:
                logger.error(f"Failed to save configuration: {e}")
                raise ConfigError(f"Failed to save configuration: {e}")

    def get_render_options(self) -> RenderOptions:
        """Snapshot the formatting settings as an immutable RenderOptions."""
        with self._instance_lock:
            return RenderOptions(
                enhanced_links=bool(self.get("format.enhanced_links", False)),
                wrap_html_tags=bool(self.get("format.wrap_html_tags", True)),
                timestamp_format=self.get("format.timestamp_format") or DEFAULT_TIMESTAMP_FORMAT,
            )

    def get_output_dir(self) -> Path:
        """Absolute notes directory. Relative paths resolve against PROJECT_ROOT."""
        with self._instance_lock:
            output_dir = Path(self.get("notes.output_dir", "notes")).expanduser()
            if output_dir.is_absolute():
                return output_dir
            return self.PROJECT_ROOT / output_dir

    def get_log_dir(self):
        """Absolute log directory, or None when file logging is disabled."""
        with self._instance_lock:
            log_dir = self.get("app.log_dir", "")
            if not log_dir:
                return None
            path = Path(log_dir).expanduser()
            return path if path.is_absolute() else self.PROJECT_ROOT / path

    @classmethod
    def reset(cls) -> None:
        """Reset singleton instance (for testing)."""
        with cls._lock:
            cls._instance = None

    @staticmethod
    def _deep_copy(obj):
        """Create a deep copy of nested dict/list structures."""
        if isinstance(obj, dict):
            return {k: ConfigManager._deep_copy(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [ConfigManager._deep_copy(item) for item in obj]
        else:
            return obj
