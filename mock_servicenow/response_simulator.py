"""
Response Simulator - Shapes create calls according to the test settings.

This module provides the ResponseSimulator class that handles:
- Forced error codes and probabilistic failure injection
- Non-blocking response delay
- Ticket creation or a suppressed-creation stub
- Settings updates, scenario activation and store inspection

"""

import asyncio
import logging
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional

from .errors import SimulatedUpstreamError
from .scenarios import activate_scenario, list_scenarios
from .settings_manager import SettingsManager
from .ticket_store import TicketStore


logger = logging.getLogger(__name__)

DISABLED_ID = "TEST_DISABLED"

RANDOM_FAILURE_STATUS = 500


@dataclass
class SimulatedResponse:
    """Successful simulated response."""
    status: int
    body: Dict[str, Any]


class ResponseSimulator:
    """Scenario-driven simulator for the incident create call.

    Precedence on every create call:
    1. a forced error code,
    2. a random failure drawn against failure_rate,
    3. the response delay, then creation (or the stub when creation is off).
    """

    def __init__(self, settings_manager: Optional[SettingsManager] = None,
                 ticket_store: Optional[TicketStore] = None,
                 seed: Optional[int] = None,
                 rng: Optional[random.Random] = None,
                 sleep: Optional[Callable[[float], Awaitable[Any]]] = None):
        """Initialize the simulator.

        Args:
            settings_manager: Optional SettingsManager. Creates one if not provided.
            ticket_store: Optional TicketStore. Built from the ticket config if not provided.
            seed: Optional random seed for reproducible failure draws.
            rng: Optional random source; takes precedence over seed.
            sleep: Optional coroutine function used for the response delay.
        """
        self._settings_manager = settings_manager or SettingsManager()
        self._ticket_store = ticket_store or TicketStore.from_config(
            self._settings_manager.get_ticket_config()
        )
        self._rng = rng or random.Random(seed)
        self._sleep = sleep or asyncio.sleep
        self._start_time = datetime.now(timezone.utc)

    @property
    def settings_manager(self) -> SettingsManager:
        return self._settings_manager

    @property
    def ticket_store(self) -> TicketStore:
        return self._ticket_store

    async def handle_create(self, payload: Optional[Dict[str, Any]]) -> SimulatedResponse:
        """Simulate the incident create call.

        Args:
            payload: Request body. Business fields are not validated.

        Returns:
            SimulatedResponse with status 201.

        Raises:
            SimulatedUpstreamError: If an error code is forced or the random
                failure draw hits.
        """
        payload = payload or {}
        settings = self._settings_manager.settings

        if settings.return_error_code:
            logger.warning(f"Returning simulated error {settings.return_error_code}")
            raise SimulatedUpstreamError(
                settings.return_error_code,
                "Simulated error",
                "Test failure simulation active"
            )

        if self._rng.random() < settings.failure_rate:
            logger.warning("Returning simulated random failure")
            raise SimulatedUpstreamError(
                RANDOM_FAILURE_STATUS,
                "Random failure",
                "Simulated random failure"
            )

        delay_ms = settings.response_delay
        if delay_ms and delay_ms > 0:
            logger.debug(f"Delaying response by {delay_ms}ms")
            await self._sleep(delay_ms / 1000.0)

        # Creation toggle is read after the delay
        if self._settings_manager.settings.create_tickets:
            ticket = self._ticket_store.create(payload)
            logger.info(f"Ticket created: {ticket.number}")
            return SimulatedResponse(status=201, body={"result": ticket.to_dict()})

        logger.warning("Ticket creation disabled by test settings")
        return SimulatedResponse(status=201, body={
            "result": {
                "sys_id": DISABLED_ID,
                "number": DISABLED_ID,
                "short_description": "Ticket creation disabled for testing"
            }
        })

    def update_settings(self, partial: Dict[str, Any]) -> Dict[str, Any]:
        """Shallow-merge partial settings."""
        return self._settings_manager.update_settings(partial)

    def get_settings(self) -> Dict[str, Any]:
        return self._settings_manager.get_settings()

    def activate_scenario(self, name: str) -> Dict[str, Any]:
        """Apply a named scenario; raises UnknownScenarioError for unknown names."""
        return activate_scenario(self._settings_manager, name)

    def list_scenarios(self) -> List[str]:
        return list_scenarios()

    def list_tickets(self) -> Dict[str, Any]:
        """Get all tickets and their count."""
        tickets = self._ticket_store.get_tickets()
        return {"tickets": tickets, "count": len(tickets)}

    def clear_tickets(self) -> int:
        """Clear the store and reset numbering.

        Returns:
            Number of tickets cleared.
        """
        cleared = self._ticket_store.clear()
        logger.info(f"Cleared {cleared} tickets")
        return cleared

    def health(self) -> Dict[str, Any]:
        """Get a status snapshot."""
        now = datetime.now(timezone.utc)
        return {
            "status": "healthy",
            "timestamp": now.isoformat(),
            "ticketCount": self._ticket_store.count(),
            "settings": self.get_settings(),
            "uptimeSeconds": (now - self._start_time).total_seconds()
        }
