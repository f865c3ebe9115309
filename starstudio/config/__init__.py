"""Simple YAML configuration loader for STAR Studio."""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List
import logging

from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Environment variables that override file settings
ENV_OVERRIDES = {
    'SUPABASE_URL': 'supabase.url',
    'SUPABASE_KEY': 'supabase.key',
    'SUPABASE_ACCESS_TOKEN': 'supabase.access_token',
    'OPENAI_API_KEY': 'openai.api_key',
    'GOOGLE_APPLICATION_CREDENTIALS': 'google_cloud.credentials_path',
}

DEFAULT_MIME_TYPES = [
    "video/webm;codecs=vp9",
    "video/webm",
    "video/mp4",
    "audio/wav",
]


class StarStudioConfig:
    """STAR Studio configuration loader."""

    def __init__(self, config_path: str, environ: Optional[Dict[str, str]] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file
            environ: Environment mapping used for secret overrides (defaults to os.environ)
        """
        self.config_file = Path(config_path)

        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = self._load_config()
        self._apply_env_overrides(os.environ if environ is None else environ)

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}") from e

        if not config:
            raise ConfigurationError("Configuration file is empty")
        if not isinstance(config, dict):
            raise ConfigurationError("Configuration file must contain a mapping")

        self._resolve_paths(config)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        for section, key in (('google_cloud', 'credentials_path'),
                             ('storage', 'data_directory'),
                             ('logging', 'file_path')):
            if section in config and isinstance(config[section], dict) and key in config[section]:
                path = config[section][key]
                if path and not os.path.isabs(path):
                    config[section][key] = str(config_dir / path)

    def _apply_env_overrides(self, environ) -> None:
        for env_name, key_path in ENV_OVERRIDES.items():
            value = environ.get(env_name)
            if value:
                self.set(key_path, value)
                logger.debug(f"Configuration key '{key_path}' taken from ${env_name}")

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'supabase.url').

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
            key_path: Dot-separated path to config value
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        for key in keys[:-1]:
            if not isinstance(config_dict.get(key), dict):
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set")

    def require(self, key_path: str) -> Any:
        """Get a configuration value that must be present."""
        value = self.get(key_path)
        if value in (None, ""):
            raise ConfigurationError(f"Missing required setting '{key_path}'")
        return value

    def get_google_credentials_path(self) -> Optional[str]:
        """Get Google credentials path, or None when speech-to-text is not configured."""
        creds_path = self.get('google_cloud.credentials_path')
        if not creds_path:
            return None

        creds_file = Path(creds_path)
        if not creds_file.exists():
            raise ConfigurationError(f"Google credentials file not found: {creds_path}")

        return str(creds_file.absolute())

    def get_data_directory(self) -> str:
        """Get data directory path."""
        data_dir = self.get('storage.data_directory', 'data')
        return str(Path(data_dir).absolute())

    def get_mime_type_preferences(self) -> List[str]:
        """Ordered recording container preferences, first supported wins."""
        return list(self.get('recording.mime_types') or DEFAULT_MIME_TYPES)
