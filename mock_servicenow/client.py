"""
Mock ServiceNow Client

Async HTTP client for integration test harnesses that drive the mock server:
create incidents, inspect and clear tickets, and switch scenarios.
"""

import logging
from typing import Any, Dict, Optional, Tuple

import aiohttp


logger = logging.getLogger(__name__)


class MockServiceNowAPIError(Exception):
    """Raised when a control endpoint returns a non-2xx status."""

    def __init__(self, message: str, status: int, body: Any = None):
        super().__init__(message)
        self.status = status
        self.body = body


class MockServiceNowClient:
    """Client for the mock ServiceNow API.

    Usage:
        async with MockServiceNowClient("http://localhost:3000") as client:
            await client.activate_scenario("service-down")
            status, body = await client.create_incident({"short_description": "disk full"})
    """

    def __init__(self, base_url: str = "http://localhost:3000", timeout: float = 30.0,
                 session: Optional[aiohttp.ClientSession] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self):
        """Async context manager entry."""
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def _ensure_session(self) -> None:
        """Ensure HTTP session is created."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def _request(self, method: str, path: str,
                       data: Optional[Dict[str, Any]] = None) -> Tuple[int, Any]:
        await self._ensure_session()
        url = f"{self.base_url}{path}"
        async with self._session.request(method, url, json=data) as response:
            body = await response.json(content_type=None)
            logger.debug(f"{method} {url} -> {response.status}")
            return response.status, body

    async def _control(self, method: str, path: str,
                       data: Optional[Dict[str, Any]] = None) -> Any:
        status, body = await self._request(method, path, data)
        if status >= 400:
            error = body.get("error", "Unknown error") if isinstance(body, dict) else body
            raise MockServiceNowAPIError(f"{method} {path} failed: {error}", status, body)
        return body

    async def create_incident(self, fields: Dict[str, Any]) -> Tuple[int, Dict[str, Any]]:
        """Create an incident.

        Simulated failures are returned rather than raised so callers can
        exercise their own retry handling.

        Returns:
            Tuple of (status, body).
        """
        return await self._request("POST", "/api/now/table/incident", fields)

    async def list_tickets(self) -> Dict[str, Any]:
        return await self._control("GET", "/api/test/tickets")

    async def clear_tickets(self) -> Dict[str, Any]:
        return await self._control("DELETE", "/api/test/tickets")

    async def get_settings(self) -> Dict[str, Any]:
        return await self._control("GET", "/api/test/settings")

    async def update_settings(self, **settings: Any) -> Dict[str, Any]:
        """Update settings, e.g. update_settings(failureRate=0.2).

        Returns:
            The updated settings.
        """
        body = await self._control("PUT", "/api/test/settings", settings)
        return body["settings"]

    async def activate_scenario(self, name: str) -> Dict[str, Any]:
        """Activate a scenario and return the resulting settings."""
        body = await self._control("POST", f"/api/test/scenario/{name}")
        return body["settings"]

    async def list_scenarios(self) -> list:
        body = await self._control("GET", "/api/test/scenarios")
        return body["scenarios"]

    async def health(self) -> Dict[str, Any]:
        return await self._control("GET", "/api/health")
