"""
Settings Manager - Manages the simulation settings.

This module provides the SettingsManager class that handles:
- Configuration loading from a dict, a YAML file or the packaged default
- The single mutable SimulationSettings record
- Shallow partial updates and reset to the configured baseline

"""

import copy
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


logger = logging.getLogger(__name__)


@dataclass
class SimulationSettings:
    """Settings that shape every simulated create call."""
    create_tickets: bool = True
    response_delay: int = 0
    failure_rate: float = 0.0
    return_error_code: Optional[int] = None

    # Wire (camelCase) name -> attribute name
    WIRE_NAMES = {
        "createTickets": "create_tickets",
        "responseDelay": "response_delay",
        "failureRate": "failure_rate",
        "returnErrorCode": "return_error_code",
    }

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase wire representation."""
        return {
            "createTickets": self.create_tickets,
            "responseDelay": self.response_delay,
            "failureRate": self.failure_rate,
            "returnErrorCode": self.return_error_code,
        }

    @classmethod
    def field_updates(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        """Map wire or attribute keys to attribute names, dropping unknown keys."""
        attribute_names = {f.name for f in fields(cls)}
        updates = {}
        for key, value in data.items():
            name = cls.WIRE_NAMES.get(key, key)
            if name in attribute_names:
                updates[name] = value
        return updates

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SimulationSettings":
        """Build settings from a (possibly partial) dictionary."""
        return replace(cls(), **cls.field_updates(data or {}))


class SettingsManager:
    """Owns the configuration and the live simulation settings.

    One instance is created per simulator and passed to every component that
    reads or mutates settings, so tests never share state.
    """

    def __init__(self, initial_config: Optional[Dict[str, Any]] = None, config_path: Optional[str] = None):
        """Initialize the settings manager.

        Args:
            initial_config: Optional dictionary with configuration.
                           If not provided, loads from config_path or default.
            config_path: Optional path to YAML configuration file.
        """
        self._config = self._load_config(initial_config, config_path)
        self._baseline = SimulationSettings.from_dict(self._config.get("settings"))
        self._settings = replace(self._baseline)

    def _load_config(self, initial_config: Optional[Dict[str, Any]], config_path: Optional[str]) -> Dict[str, Any]:
        """Load configuration from provided dict, file, or default."""
        if initial_config is not None:
            return copy.deepcopy(initial_config)

        if config_path is not None:
            return load_yaml_config(config_path)

        default_path = get_default_config_path()
        if default_path and os.path.exists(default_path):
            return load_yaml_config(default_path)

        return get_default_config()

    @property
    def settings(self) -> SimulationSettings:
        """Get the live settings object."""
        return self._settings

    def get_settings(self) -> Dict[str, Any]:
        """Get current settings as a wire dictionary."""
        return self._settings.to_dict()

    def get_baseline(self) -> Dict[str, Any]:
        """Get the baseline settings restored by reset."""
        return self._baseline.to_dict()

    def update_settings(self, partial: Dict[str, Any]) -> Dict[str, Any]:
        """Shallow-merge the given fields into the current settings.

        Unspecified fields are left unchanged. Values are not range checked.

        Args:
            partial: Settings fields in camelCase or snake_case.

        Returns:
            The updated settings as a wire dictionary.
        """
        updates = SimulationSettings.field_updates(partial)
        for name, value in updates.items():
            setattr(self._settings, name, value)
        logger.info(f"Test settings updated: {self._settings.to_dict()}")
        return self.get_settings()

    def reset(self) -> Dict[str, Any]:
        """Restore the baseline settings."""
        self._settings = replace(self._baseline)
        return self.get_settings()

    def get_server_config(self) -> Dict[str, Any]:
        """Get server configuration."""
        return copy.deepcopy(self._config.get("server", {}))

    def get_ticket_config(self) -> Dict[str, Any]:
        """Get ticket numbering configuration."""
        return copy.deepcopy(self._config.get("tickets", {}))


def get_default_config_path() -> Optional[str]:
    """Get the path to the packaged default configuration file."""
    config_path = Path(__file__).parent / "config" / "default_config.yaml"
    if config_path.exists():
        return str(config_path)
    return None


def load_yaml_config(config_path: str) -> Dict[str, Any]:
    """Load configuration from YAML file.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        yaml.YAMLError: If config file is invalid YAML.
    """
    with open(config_path, 'r') as f:
        config = yaml.safe_load(f)
    return config if config else {}


def get_default_config() -> Dict[str, Any]:
    """Get default configuration values."""
    return {
        "server": {
            "host": "localhost",
            "port": 3000
        },
        "settings": SimulationSettings().to_dict(),
        "tickets": {
            "prefix": "INC",
            "number_width": 7,
            "created_by": "azure_insight"
        }
    }
