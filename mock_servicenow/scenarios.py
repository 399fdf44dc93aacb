"""
Scenarios - Named presets that simulate upstream failure modes.

Each scenario overwrites one or more settings fields. `reset` restores the
baseline settings. The original ServiceNow-prefixed names are kept as aliases.
"""

import logging
from enum import Enum
from typing import Any, Dict, List

from .errors import UnknownScenarioError
from .settings_manager import SettingsManager


logger = logging.getLogger(__name__)


class Scenario(Enum):
    """Supported scenario names."""
    SERVICE_DOWN = "service-down"
    SERVICE_AUTH_FAIL = "service-auth-fail"
    SERVICE_SLOW = "service-slow"
    SERVICE_INTERMITTENT = "service-intermittent"
    RESET = "reset"


SCENARIO_ALIASES = {
    "servicenow-down": Scenario.SERVICE_DOWN,
    "servicenow-auth-fail": Scenario.SERVICE_AUTH_FAIL,
    "servicenow-slow": Scenario.SERVICE_SLOW,
    "servicenow-intermittent": Scenario.SERVICE_INTERMITTENT,
}

SCENARIO_EFFECTS: Dict[Scenario, Dict[str, Any]] = {
    Scenario.SERVICE_DOWN: {"returnErrorCode": 503},
    Scenario.SERVICE_AUTH_FAIL: {"returnErrorCode": 401},
    Scenario.SERVICE_SLOW: {"responseDelay": 5000},
    Scenario.SERVICE_INTERMITTENT: {"failureRate": 0.5},
}


def resolve_scenario(name: str) -> Scenario:
    """Map a scenario name or alias to a Scenario.

    Raises:
        UnknownScenarioError: If the name is not recognised.
    """
    if name in SCENARIO_ALIASES:
        return SCENARIO_ALIASES[name]
    try:
        return Scenario(name)
    except ValueError:
        raise UnknownScenarioError(name) from None


def list_scenarios() -> List[str]:
    """Get all accepted scenario names, canonical names first."""
    return [scenario.value for scenario in Scenario] + list(SCENARIO_ALIASES)


def activate_scenario(settings_manager: SettingsManager, name: str) -> Dict[str, Any]:
    """Apply a named scenario to the settings.

    Args:
        settings_manager: Settings to mutate.
        name: Scenario name or alias.

    Returns:
        The settings after the scenario is applied.

    Raises:
        UnknownScenarioError: If the name is not recognised. Settings are
            left unchanged.
    """
    scenario = resolve_scenario(name)

    if scenario is Scenario.RESET:
        settings = settings_manager.reset()
    else:
        settings = settings_manager.update_settings(SCENARIO_EFFECTS[scenario])

    logger.info(f"Scenario '{name}' activated: {settings}")
    return settings
