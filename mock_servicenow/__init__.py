"""
Mock ServiceNow - A scenario-driven ServiceNow incident API double.

This package provides an in-memory incident table API whose responses can be
shaped by test settings and named failure scenarios, so integration tests can
exercise their callers' error and retry handling.
"""

from .errors import (
    MockServiceNowError,
    SimulatedUpstreamError,
    UnknownScenarioError,
    InvalidRequestError,
)
from .settings_manager import SettingsManager, SimulationSettings
from .ticket_store import Ticket, TicketStore
from .scenarios import Scenario, activate_scenario, list_scenarios
from .response_simulator import ResponseSimulator, SimulatedResponse
from .server import MockServiceNowServer, create_app
from .config_validator import ConfigValidator, ConfigValidationError, validate_and_report
from .client import MockServiceNowClient, MockServiceNowAPIError

__version__ = "0.1.0"

__all__ = [
    # Errors
    "MockServiceNowError",
    "SimulatedUpstreamError",
    "UnknownScenarioError",
    "InvalidRequestError",
    # Settings
    "SettingsManager",
    "SimulationSettings",
    # Tickets
    "Ticket",
    "TicketStore",
    # Scenarios
    "Scenario",
    "activate_scenario",
    "list_scenarios",
    # Simulator
    "ResponseSimulator",
    "SimulatedResponse",
    # Server
    "MockServiceNowServer",
    "create_app",
    # Config Validator
    "ConfigValidator",
    "ConfigValidationError",
    "validate_and_report",
    # Client
    "MockServiceNowClient",
    "MockServiceNowAPIError",
]
