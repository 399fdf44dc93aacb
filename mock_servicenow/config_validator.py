"""Configuration validation module for the mock ServiceNow server.

This module provides configuration validation to ensure all configuration
files are properly formatted and contain required fields.
"""

from typing import Dict, Any, List, Tuple
import yaml
from pathlib import Path

from .settings_manager import SimulationSettings


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""
    pass


class ConfigValidator:
    """Validates mock ServiceNow configuration files."""

    # Required top-level sections
    REQUIRED_SECTIONS = ["server", "settings"]

    # Required server configuration fields
    REQUIRED_SERVER_FIELDS = ["host", "port"]

    @staticmethod
    def validate_config_file(config_path: str) -> Tuple[bool, List[str]]:
        """Validate a configuration file.

        Args:
            config_path: Path to the configuration file.

        Returns:
            Tuple of (is_valid, error_messages).
        """
        try:
            with open(config_path, 'r') as f:
                config = yaml.safe_load(f)
        except FileNotFoundError:
            return False, [f"Configuration file not found: {config_path}"]
        except yaml.YAMLError as e:
            return False, [f"Invalid YAML format: {str(e)}"]

        if config is None:
            return False, ["Configuration file is empty"]

        return ConfigValidator.validate_config(config)

    @staticmethod
    def validate_config(config: Dict[str, Any]) -> Tuple[bool, List[str]]:
        """Validate an already loaded configuration dictionary."""
        if not isinstance(config, dict):
            return False, ["Configuration must be a mapping"]

        errors = []

        for section in ConfigValidator.REQUIRED_SECTIONS:
            if section not in config:
                errors.append(f"Missing required section: {section}")

        if "server" in config:
            errors.extend(ConfigValidator._validate_server(config["server"]))

        if "settings" in config:
            errors.extend(ConfigValidator._validate_settings(config["settings"]))

        if "tickets" in config:
            errors.extend(ConfigValidator._validate_tickets(config["tickets"]))

        return len(errors) == 0, errors

    @staticmethod
    def _validate_server(server_config: Dict[str, Any]) -> List[str]:
        """Validate server configuration section."""
        errors = []

        for field in ConfigValidator.REQUIRED_SERVER_FIELDS:
            if field not in server_config:
                errors.append(f"Missing required server field: {field}")

        if "port" in server_config:
            port = server_config["port"]
            if not isinstance(port, int) or port < 1 or port > 65535:
                errors.append(f"Invalid port number: {port} (must be 1-65535)")

        return errors

    @staticmethod
    def _validate_settings(settings_config: Dict[str, Any]) -> List[str]:
        """Validate baseline simulation settings."""
        errors = []

        for key in settings_config:
            if key not in SimulationSettings.WIRE_NAMES:
                errors.append(f"Unknown setting: {key}")

        if "createTickets" in settings_config and not isinstance(settings_config["createTickets"], bool):
            errors.append(f"createTickets must be a boolean, got {type(settings_config['createTickets'])}")

        if "responseDelay" in settings_config:
            delay = settings_config["responseDelay"]
            if not isinstance(delay, int) or isinstance(delay, bool):
                errors.append(f"responseDelay must be an integer, got {type(delay)}")
            elif delay < 0:
                errors.append(f"responseDelay cannot be negative, got {delay}")

        if "failureRate" in settings_config:
            rate = settings_config["failureRate"]
            if not isinstance(rate, (int, float)) or isinstance(rate, bool):
                errors.append(f"failureRate must be numeric, got {type(rate)}")
            elif rate < 0 or rate > 1:
                errors.append(f"failureRate must be 0-1, got {rate}")

        if settings_config.get("returnErrorCode") is not None:
            code = settings_config["returnErrorCode"]
            if not isinstance(code, int) or code < 400 or code > 599:
                errors.append(f"returnErrorCode must be an HTTP error status (400-599), got {code}")

        return errors

    @staticmethod
    def _validate_tickets(ticket_config: Dict[str, Any]) -> List[str]:
        """Validate ticket numbering configuration."""
        errors = []

        if "prefix" in ticket_config and not isinstance(ticket_config["prefix"], str):
            errors.append(f"prefix must be a string, got {type(ticket_config['prefix'])}")

        if "number_width" in ticket_config:
            width = ticket_config["number_width"]
            if not isinstance(width, int) or width < 1:
                errors.append(f"number_width must be an integer >= 1, got {width}")

        if "created_by" in ticket_config and not isinstance(ticket_config["created_by"], str):
            errors.append(f"created_by must be a string, got {type(ticket_config['created_by'])}")

        return errors

    @staticmethod
    def validate_all_configs(config_dir: str) -> Tuple[bool, Dict[str, List[str]]]:
        """Validate all configuration files in a directory.

        Args:
            config_dir: Directory containing configuration files.

        Returns:
            Tuple of (all_valid, validation_results_dict).
        """
        config_path = Path(config_dir)
        results = {}
        all_valid = True

        default_config = config_path / "default_config.yaml"
        if default_config.exists():
            is_valid, errors = ConfigValidator.validate_config_file(str(default_config))
            results["default_config.yaml"] = errors
            all_valid = all_valid and is_valid

        scenarios_dir = config_path / "scenarios"
        if scenarios_dir.exists():
            for scenario_file in sorted(scenarios_dir.glob("*.yaml")):
                is_valid, errors = ConfigValidator.validate_config_file(str(scenario_file))
                results[f"scenarios/{scenario_file.name}"] = errors
                all_valid = all_valid and is_valid

        return all_valid, results


def validate_and_report(config_dir: str) -> bool:
    """Validate all configurations and print report.

    Args:
        config_dir: Directory containing configuration files.

    Returns:
        True if all configurations are valid, False otherwise.
    """
    all_valid, results = ConfigValidator.validate_all_configs(config_dir)

    print("Configuration Validation Report")
    print("=" * 50)

    for config_file, errors in results.items():
        if errors:
            print(f"\n❌ {config_file}")
            for error in errors:
                print(f"   - {error}")
        else:
            print(f"\n✓ {config_file}")

    print("\n" + "=" * 50)
    if all_valid:
        print("✓ All configurations are valid!")
    else:
        print("❌ Some configurations have errors.")

    return all_valid
