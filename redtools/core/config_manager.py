"""Thread-safe YAML configuration manager for redtools."""

import logging
import os
import threading
from pathlib import Path
from typing import Any, Optional

import yaml

from redtools.core.exceptions import ConfigError
from redtools.core.types import GeminiModel

logger = logging.getLogger("redtools")

HOME_ENV_VAR = "REDTOOLS_HOME"


def app_home() -> Path:
    """Per-user data directory: $REDTOOLS_HOME, else ~/.redtools."""
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".redtools"


# Default configuration template
DEFAULT_CONFIG = {
    "app": {
        "version": "1.0.0",
        "log_level": "INFO",
    },
    "gemini": {
        "api_key": "",
        "model": GeminiModel.FLASH.value,
        "timeout": 60,
    },
    "reddit": {
        "client_id": "",
        "client_secret": "",
        "username": "",
        "password": "",
        "user_agent": "subreddit_summarizer/1.0 (by /u/redtools)",
        "page_size": 25,
        "max_pages": 40,
        "fetch_delay_sec": 0.5,
        "post_limit": 50,
    },
    "shared": {
        "store_path": "db/shared.db",
    },
    "security": {
        "mask_logs": True,
    },
}


class ConfigManager:
    """Thread-safe configuration manager.

    Manages application configuration with:
    - Thread-safe operations using RLock
    - Automatic settings.yaml creation if missing
    - Dot-notation key access (e.g., "gemini.model")
    - Validation rules for critical settings

    One instance is owned by the AppContext; there is no module-level
    instance.
    """

    def __init__(self, config_path: Optional[Path] = None):
        self.HOME_DIR = app_home()
        self.CONFIG_PATH = Path(config_path) if config_path else self.HOME_DIR / "settings.yaml"

        self._config = {}
        self._instance_lock = threading.RLock()

        self._load_or_create_config()

    def _load_or_create_config(self):
        """Load settings.yaml or create it from defaults."""
        if self.CONFIG_PATH.exists():
            try:
                with open(self.CONFIG_PATH, 'r', encoding='utf-8') as f:
                    loaded = yaml.safe_load(f) or {}
                if not isinstance(loaded, dict):
                    logger.warning(f"Ignoring non-mapping settings in {self.CONFIG_PATH}")
                    loaded = {}
                self._config = self._merge(self._deep_copy(DEFAULT_CONFIG), loaded)
                logger.info(f"Loaded configuration from {self.CONFIG_PATH}")
            except yaml.YAMLError as e:
                logger.error(f"Failed to parse YAML at {self.CONFIG_PATH}: {e}")
                logger.warning("Using DEFAULT_CONFIG due to parse error")
                self._config = self._deep_copy(DEFAULT_CONFIG)
            except OSError as e:
                logger.error(f"Unexpected error loading config: {e}")
                logger.warning("Using DEFAULT_CONFIG")
                self._config = self._deep_copy(DEFAULT_CONFIG)
        else:
            logger.info(f"Config file not found at {self.CONFIG_PATH}")
            self._config = self._deep_copy(DEFAULT_CONFIG)
            self.save()
            logger.info(f"Created default configuration at {self.CONFIG_PATH}")

    def reload(self) -> None:
        """Re-read settings.yaml from disk."""
        with self._instance_lock:
            self._load_or_create_config()

    def get(self, key: str, default=None) -> Any:
        """Get configuration value using dot-notation key.

        Example:
            >>> config.get("gemini.model")
            'gemini-1.5-flash-latest'
        """
        with self._instance_lock:
            parts = key.split('.')
            value = self._config

            for part in parts:
                if isinstance(value, dict) and part in value:
                    value = value[part]
                else:
                    return default

            return value

    def set(self, key: str, value: Any) -> None:
        """Set configuration value using dot-notation key.

        Note: This does NOT save to disk. Use save() to persist changes.
        """
        with self._instance_lock:
            parts = key.split('.')
            target = self._config

            for part in parts[:-1]:
                if part not in target or not isinstance(target[part], dict):
                    target[part] = {}
                target = target[part]

            target[parts[-1]] = value

    def update(self, changes: dict) -> None:
        """Batch update configuration from flat dict of dot-notation keys.

        Applies validation rules and saves to disk once after all updates.

        Validation Rules:
            - gemini.model: must be a known GeminiModel value
            - gemini.timeout: minimum 10
            - reddit.post_limit: clamped to 1-100
            - reddit.fetch_delay_sec: minimum 0
            - gemini.api_key: surrounding whitespace stripped
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
        if key == "gemini.api_key":
            return str(value or "").strip()

        if key == "gemini.model":
            model = value.value if isinstance(value, GeminiModel) else value
            if model not in {m.value for m in GeminiModel}:
                logger.warning(f"Unknown Gemini model '{model}'. Ignoring.")
                return None
            return model

        if key == "gemini.timeout":
            try:
                timeout = int(value)
                if timeout < 10:
                    logger.warning(f"gemini timeout {timeout} < 10. Forcing to 10.")
                    return 10
                return timeout
            except (TypeError, ValueError):
                logger.warning(f"Invalid timeout '{value}'. Must be int. Ignoring.")
                return None

        if key == "reddit.post_limit":
            try:
                limit = int(value)
                if not (1 <= limit <= 100):
                    clamped = min(max(limit, 1), 100)
                    logger.warning(f"post_limit {limit} out of range [1, 100]. Forcing to {clamped}.")
                    return clamped
                return limit
            except (TypeError, ValueError):
                logger.warning(f"Invalid post_limit '{value}'. Must be int. Ignoring.")
                return None

        if key == "reddit.fetch_delay_sec":
            try:
                delay = float(value)
                if delay < 0:
                    logger.warning(f"fetch_delay_sec {delay} < 0. Forcing to 0.")
                    return 0.0
                return delay
            except (TypeError, ValueError):
                logger.warning(f"Invalid fetch_delay_sec '{value}'. Must be float. Ignoring.")
                return None

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

    def resolve_path(self, key: str, default: str) -> Path:
        """Resolve a configured path relative to the per-user data directory."""
        with self._instance_lock:
            path = Path(self.get(key, default))
            return path if path.is_absolute() else self.HOME_DIR / path

    @staticmethod
    def _merge(base: dict, override: dict) -> dict:
        """Overlay values from settings.yaml onto the defaults."""
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(base.get(key), dict):
                ConfigManager._merge(base[key], value)
            else:
                base[key] = value
        return base

    @staticmethod
    def _deep_copy(obj):
        """Create a deep copy of nested dict/list structures."""
        if isinstance(obj, dict):
            return {k: ConfigManager._deep_copy(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [ConfigManager._deep_copy(item) for item in obj]
        else:
            return obj
