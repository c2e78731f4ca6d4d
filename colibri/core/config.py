"""
Configuration Manager for Colibri

Handles YAML/JSON configuration files and environment variable overrides,
and loads raw rule documents for the command line front end.
"""

import os
import json
import yaml
from typing import Dict, Any, Optional
from dataclasses import dataclass
from pathlib import Path

from colibri.core.base import ConfigurationError


@dataclass
class ClientConfig:
    """Configuration for the HTTP transport"""
    timeout: float = 5.0
    user_agent: str = "colibri/0.1"

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ClientConfig":
        data = data or {}
        return cls(
            timeout=float(data.get('timeout', cls.timeout)),
            user_agent=data.get('user_agent') or cls.user_agent
        )


@dataclass
class ColibriConfig:
    """Which politeness collaborators are wired into the orchestrator"""
    respect_robots_txt: bool = True
    use_delay: bool = True

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ColibriConfig":
        data = data or {}
        return cls(
            respect_robots_txt=bool(data.get('respect_robots_txt', True)),
            use_delay=bool(data.get('use_delay', True))
        )


@dataclass
class LoggingConfig:
    """Logging system configuration"""
    level: str = "INFO"
    file: Optional[str] = None
    max_size: str = "10MB"
    backup_count: int = 3


class ConfigManager:
    """
    Centralized configuration manager with support for YAML/JSON files
    and environment variable integration.
    """

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or "config/colibri.yaml"
        self._config_data: Dict[str, Any] = {}
        self.client_config: Optional[ClientConfig] = None
        self.colibri_config: Optional[ColibriConfig] = None
        self.logging_config: Optional[LoggingConfig] = None

    def load_config(self, config_path: Optional[str] = None) -> Dict[str, Any]:
        """Load configuration from file with environment variable override"""
        if config_path:
            self.config_path = config_path

        config_file = Path(self.config_path)

        # Defaults when the file doesn't exist
        if not config_file.exists():
            self._config_data = self._get_default_config()
        else:
            data = self._read_document(config_file)
            if not isinstance(data, dict):
                raise ConfigurationError(f"Configuration in {config_file} must be a mapping")
            self._config_data = data

        # Override with environment variables
        self._apply_env_overrides()

        # Parse into dataclass objects
        self._parse_config()

        return self._config_data

    def load_rules(self, rules_path: str) -> Dict[str, Any]:
        """
        Load a raw rule document

        Args:
            rules_path: Path to a YAML or JSON file holding the rule mapping

        Returns:
            The raw rule mapping, ready for new_rules()
        """
        rules_file = Path(rules_path)
        if not rules_file.is_file():
            raise ConfigurationError(f"Rules file not found: {rules_file}")

        raw = self._read_document(rules_file)
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Rules in {rules_file} must be a mapping")
        return raw

    def _read_document(self, path: Path) -> Any:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                if path.suffix.lower() == '.json':
                    return json.load(f)
                # Assume YAML
                return yaml.safe_load(f) or {}
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load {path}: {e}") from e

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration dictionary"""
        return {
            'client': {
                'timeout': 5.0,
                'user_agent': 'colibri/0.1'
            },
            'colibri': {
                'respect_robots_txt': True,
                'use_delay': True
            },
            'logging': {
                'level': 'INFO',
                'file': None,
                'max_size': '10MB',
                'backup_count': 3
            }
        }

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides"""
        # Log level override
        if os.getenv('COLIBRI_LOG_LEVEL'):
            self._config_data.setdefault('logging', {})['level'] = os.getenv('COLIBRI_LOG_LEVEL')

        # User-Agent override
        if os.getenv('COLIBRI_USER_AGENT'):
            self._config_data.setdefault('client', {})['user_agent'] = os.getenv('COLIBRI_USER_AGENT')

        # Timeout override
        if os.getenv('COLIBRI_TIMEOUT'):
            try:
                self._config_data.setdefault('client', {})['timeout'] = float(os.getenv('COLIBRI_TIMEOUT'))
            except ValueError:
                pass

    def _parse_config(self) -> None:
        """Parse configuration into dataclass objects"""
        self.client_config = ClientConfig.from_dict(self._config_data.get('client'))
        self.colibri_config = ColibriConfig.from_dict(self._config_data.get('colibri'))

        logging_data = self._config_data.get('logging') or {}
        self.logging_config = LoggingConfig(
            level=logging_data.get('level', 'INFO'),
            file=logging_data.get('file'),
            max_size=logging_data.get('max_size', '10MB'),
            backup_count=logging_data.get('backup_count', 3)
        )
