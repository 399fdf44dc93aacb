#!/usr/bin/env python3
"""
Start script for the mock ServiceNow server.

This script starts the mock ServiceNow server with configurable options.
It handles argument parsing, configuration loading, logging setup, and server initialization.

Usage:
    mock-servicenow-start [--config CONFIG_FILE] [--host HOST] [--port PORT] [--log-level LOG_LEVEL]
"""

import argparse
import asyncio
import logging
import os
import signal
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from .config_validator import ConfigValidator
from .response_simulator import ResponseSimulator
from .server import MockServiceNowServer
from .settings_manager import SettingsManager, get_default_config, get_default_config_path


def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """Set up logging configuration.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional file to log to in addition to stdout.

    Returns:
        Configured logger instance.
    """
    log_level_value = getattr(logging, log_level.upper(), logging.INFO)

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level_value,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )

    return logging.getLogger("mock_servicenow")


def load_configuration(config_file: str) -> dict:
    """Load configuration from YAML file.

    Raises:
        FileNotFoundError: If configuration file not found.
        yaml.YAMLError: If configuration file is invalid YAML.
        ValueError: If configuration file is empty.
    """
    config_path = Path(config_file)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_file}")

    with open(config_path, 'r') as f:
        config = yaml.safe_load(f)

    if config is None:
        raise ValueError(f"Configuration file is empty: {config_file}")

    return config


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Start the mock ServiceNow server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Start with default configuration
  mock-servicenow-start

  # Start with custom configuration
  mock-servicenow-start --config config/scenarios/slow_and_flaky.yaml

  # Start with custom host and port
  mock-servicenow-start --host 0.0.0.0 --port 8000

  # Reproducible random failures
  mock-servicenow-start --seed 42
        """
    )

    parser.add_argument(
        '--config',
        type=str,
        default=get_default_config_path(),
        help='Path to configuration file (default: packaged default_config.yaml)'
    )

    parser.add_argument(
        '--host',
        type=str,
        default=None,
        help='Server host (overrides config file)'
    )

    parser.add_argument(
        '--port',
        type=int,
        default=None,
        help='Server port (overrides PORT and config file)'
    )

    parser.add_argument(
        '--log-level',
        type=str,
        default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Logging level (default: INFO)'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Also write logs to this file'
    )

    parser.add_argument(
        '--seed',
        type=int,
        default=None,
        help='Random seed for failure injection'
    )

    parser.add_argument(
        '--validate-only',
        action='store_true',
        help='Validate configuration and exit'
    )

    return parser.parse_args(argv)


def resolve_port(cli_port: Optional[int], config: dict) -> int:
    """Pick the port: command line, then PORT, then config."""
    if cli_port:
        return cli_port
    env_port = os.environ.get("PORT")
    if env_port:
        return int(env_port)
    return int(config.get("server", {}).get("port", 3000))


async def serve(args: argparse.Namespace, logger: logging.Logger) -> int:
    """Load configuration and run the server until interrupted."""
    if args.config:
        logger.info(f"Loading configuration from {args.config}")
        config = load_configuration(args.config)
    else:
        logger.info("No configuration file found, using built-in defaults")
        config = get_default_config()

    logger.info("Validating configuration")
    is_valid, errors = ConfigValidator.validate_config(config)
    if not is_valid:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        return 1

    if args.validate_only:
        logger.info("Configuration validation successful (--validate-only)")
        return 0

    config.setdefault("server", {})
    if args.host:
        config["server"]["host"] = args.host
        logger.info(f"Overriding host to {args.host}")
    config["server"]["port"] = resolve_port(args.port, config)

    settings_manager = SettingsManager(initial_config=config)
    simulator = ResponseSimulator(settings_manager, seed=args.seed)

    server_config = settings_manager.get_server_config()
    host = server_config.get("host", "localhost")
    port = server_config["port"]
    server = MockServiceNowServer(host, port, simulator)

    loop = asyncio.get_running_loop()
    handled_signals = []
    if sys.platform != "win32":
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, server.request_shutdown)
            handled_signals.append(sig)

    try:
        await server.start()
        logger.info(f"Mock ServiceNow API available at http://{host}:{port}/api")
        logger.info("Press Ctrl+C to stop")

        try:
            await server.serve_forever()
        finally:
            logger.info("Shutting down mock ServiceNow server")
            await server.stop()
    finally:
        for sig in handled_signals:
            loop.remove_signal_handler(sig)
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the mock ServiceNow server."""
    args = parse_arguments(argv)
    logger = setup_logging(args.log_level, args.log_file)
    logger.info("Starting mock ServiceNow server")

    try:
        exit_code = asyncio.run(serve(args, logger))
    except FileNotFoundError as e:
        logger.error(f"Configuration error: {e}")
        exit_code = 1
    except yaml.YAMLError as e:
        logger.error(f"YAML parsing error: {e}")
        exit_code = 1
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        exit_code = 1
    except KeyboardInterrupt:
        logger.info("Received interrupt signal")
        exit_code = 0

    sys.exit(exit_code)


if __name__ == '__main__':
    main()
