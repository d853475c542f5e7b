"""Simple YAML configuration loader for Rehearse."""

import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

from ..models.capture import DeviceConstraints

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    "capture": {
        "sample_rate": 16000,
        "chunk_size": 1024,
        "channels": 1,
        "flush_interval_seconds": 1.0,
        "grace_period_seconds": 0.5,
        "mime_candidates": [
            "audio/webm;codecs=opus",
            "audio/ogg;codecs=opus",
            "audio/wav;codecs=pcm_s16le",
            "audio/wav",
            "audio/L16",
        ],
        "video": True,
        "camera_index": 0,
        "echo_cancellation": True,
        "noise_suppression": True,
        "auto_gain_control": True,
    },
    "google_cloud": {
        "language": "en-US",
        "use_enhanced_model": True,
        "enable_automatic_punctuation": True,
        "request_timeout_seconds": 30.0,
    },
    "storage": {
        "data_directory": "data",
        "keep_days": 30,
    },
    "logging": {
        "level": "INFO",
        "file_path": "logs/rehearse.log",
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


class RehearseConfig:
    """Rehearse configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, built-in defaults
                        are used and relative paths resolve against the
                        current directory.
        """
        self.config_file = Path(config_path) if config_path else None

        if self.config_file is None:
            logger.info("No configuration file given, using defaults")
            self.config = copy.deepcopy(DEFAULT_CONFIG)
            self._resolve_paths(self.config, Path.cwd())
            return

        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file over the defaults."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}") from e

        if not loaded:
            raise ValueError("Configuration file is empty")
        if not isinstance(loaded, dict):
            raise ValueError("Configuration file must contain a mapping")

        config = _merge(copy.deepcopy(DEFAULT_CONFIG), loaded)
        self._resolve_paths(config, self.config_file.parent)

        logger.info("Configuration loaded successfully")
        return config

    @staticmethod
    def _resolve_paths(config: Dict[str, Any], base_dir: Path) -> None:
        """Resolve relative paths in configuration against base_dir."""
        for section, key in (('google_cloud', 'credentials_path'),
                             ('storage', 'data_directory'),
                             ('logging', 'file_path')):
            value = config.get(section, {}).get(key)
            if value and not os.path.isabs(value):
                config[section][key] = str(base_dir / value)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'capture.sample_rate').

        Args:
            key_path: Dot-separated key path
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'capture.video')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_google_credentials_path(self) -> str:
        """Get Google credentials path - raises if not configured or missing."""
        creds_path = self.get('google_cloud.credentials_path')
        if not creds_path:
            raise ValueError("Google credentials path not configured in rehearse.yaml")

        creds_file = Path(creds_path)
        if not creds_file.exists():
            raise FileNotFoundError(f"Google credentials file not found: {creds_path}")

        return str(creds_file.absolute())

    def get_data_directory(self) -> str:
        """Get data directory path."""
        data_dir = self.get('storage.data_directory', 'data')
        return str(Path(data_dir).absolute())

    def get_device_constraints(self) -> DeviceConstraints:
        return DeviceConstraints(
            video=bool(self.get('capture.video', True)),
            echo_cancellation=bool(self.get('capture.echo_cancellation', True)),
            noise_suppression=bool(self.get('capture.noise_suppression', True)),
            auto_gain_control=bool(self.get('capture.auto_gain_control', True)),
        )
