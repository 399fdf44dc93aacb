"""
Client tests against an in-process server.
"""

import pytest
import pytest_asyncio
from aiohttp.test_utils import TestServer

from mock_servicenow.client import MockServiceNowAPIError, MockServiceNowClient
from mock_servicenow.server import create_app


@pytest_asyncio.fixture
async def client(simulator):
    server = TestServer(create_app(simulator))
    await server.start_server()
    try:
        async with MockServiceNowClient(f"http://{server.host}:{server.port}") as mock_client:
            yield mock_client
    finally:
        await server.close()


@pytest.mark.asyncio
class TestMockServiceNowClient:
    """Test MockServiceNowClient against the real application."""

    async def test_create_and_list(self, client):
        """Test creating an incident and listing it."""
        status, body = await client.create_incident({"short_description": "disk full"})

        assert status == 201
        assert body["result"]["number"] == "INC0000001"
        listing = await client.list_tickets()
        assert listing["count"] == 1

    async def test_simulated_failure_is_returned(self, client):
        """Test that create failures are returned, not raised."""
        await client.activate_scenario("service-auth-fail")

        status, body = await client.create_incident({})

        assert status == 401
        assert body["error"] == "Simulated error"

    async def test_settings_round_trip(self, client):
        """Test updating and reading settings."""
        settings = await client.update_settings(failureRate=0.2, responseDelay=5)

        assert settings["failureRate"] == 0.2
        assert await client.get_settings() == settings

    async def test_unknown_scenario_raises(self, client):
        """Test that control errors raise MockServiceNowAPIError."""
        with pytest.raises(MockServiceNowAPIError) as exc_info:
            await client.activate_scenario("nope")

        assert exc_info.value.status == 400

    async def test_clear_and_health(self, client):
        """Test clearing tickets and reading health."""
        await client.create_incident({})

        cleared = await client.clear_tickets()
        health = await client.health()

        assert cleared["remainingCount"] == 0
        assert health["ticketCount"] == 0
        assert "reset" in await client.list_scenarios()
