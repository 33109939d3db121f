"""YAML configuration loader for SaySomething."""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

from ..models.audio import AudioFormat

logger = logging.getLogger(__name__)


class SaySomethingConfig:
    """SaySomething configuration loader."""

    def __init__(self, config_path: str):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file
        """
        self.config_file = Path(config_path)

        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")
        except OSError as e:
            raise ValueError(f"Failed to load configuration: {e}")

        if not config or not isinstance(config, dict):
            raise ValueError("Configuration file is empty")

        self._resolve_paths(config)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        for section, key in (('recognition', 'credentials_path'),
                             ('storage', 'data_directory'),
                             ('logging', 'file_path')):
            section_config = config.get(section)
            if not isinstance(section_config, dict):
                continue
            path = section_config.get(key)
            if path and not os.path.isabs(path):
                section_config[key] = str(config_dir / path)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'recognition.language').

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
        """Set configuration value using dot notation."""
        keys = key_path.split('.')
        config_dict = self.config

        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_credentials_path(self) -> Optional[str]:
        """Get the recognition credentials path, or None if not configured.

        A missing file is not an error here; the recognition backend reports
        it as a denied authorization.
        """
        creds_path = self.get('recognition.credentials_path')
        if not creds_path:
            return None
        return str(Path(creds_path).absolute())

    def get_data_directory(self) -> str:
        """Get data directory path."""
        data_dir = self.get('storage.data_directory', 'data')
        return str(Path(data_dir).absolute())

    def get_audio_format(self) -> AudioFormat:
        """Build the recorder format from the ``audio`` section."""
        return AudioFormat(
            codec=self.get('audio.codec', 'LINEAR16'),
            sample_rate=int(self.get('audio.sample_rate', 44100)),
            channels=int(self.get('audio.channels', 2)),
            quality=self.get('audio.quality', 'max'),
            chunk_size=int(self.get('audio.chunk_size', 1024)),
        )
