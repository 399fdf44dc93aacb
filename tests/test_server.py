"""
HTTP server tests.

It tests:
- Create endpoint status codes and bodies
- Test control endpoints under both route forms
- End-to-end create, list and clear workflow
- Server start and stop
"""

import re

import pytest

from mock_servicenow.response_simulator import ResponseSimulator
from mock_servicenow.server import MockServiceNowServer
from mock_servicenow.settings_manager import SettingsManager


NUMBER_PATTERN = re.compile(r"^INC\d{7}$")


@pytest.mark.asyncio
class TestIncidentEndpoint:
    """Test the create endpoint."""

    async def test_end_to_end_create_and_clear(self, http_client):
        """Test create, list, clear and create again."""
        resp = await http_client.post("/incidents", json={"shortDescription": "disk full"})
        assert resp.status == 201
        body = await resp.json()
        assert NUMBER_PATTERN.match(body["result"]["number"])

        resp = await http_client.get("/test/tickets")
        listing = await resp.json()
        assert listing["count"] == 1

        resp = await http_client.delete("/test/tickets")
        assert resp.status == 200
        assert await resp.json() == {
            "message": "Cleared 1 tickets",
            "remainingCount": 0,
        }

        resp = await http_client.get("/test/tickets")
        assert (await resp.json())["count"] == 0

        resp = await http_client.post("/incidents", json={"shortDescription": "disk full"})
        assert (await resp.json())["result"]["number"] == "INC0000001"

    async def test_servicenow_table_path(self, http_client):
        """Test the ServiceNow-compatible create path."""
        resp = await http_client.post(
            "/api/now/table/incident",
            json={"short_description": "printer on fire", "urgency": "1"}
        )

        assert resp.status == 201
        result = (await resp.json())["result"]
        assert result["short_description"] == "printer on fire"
        assert result["urgency"] == "1"
        assert result["state"] == "1"
        assert result["created_by"] == "azure_insight"

    async def test_forced_error_code(self, http_client):
        """Test that the injected status code is returned."""
        await http_client.put("/test/settings", json={"returnErrorCode": 503, "failureRate": 1})

        resp = await http_client.post("/incidents", json={})

        assert resp.status == 503
        assert await resp.json() == {
            "error": "Simulated error",
            "details": "Test failure simulation active",
        }

    async def test_random_failure(self, http_client):
        """Test the random failure response."""
        await http_client.put("/test/settings", json={"failureRate": 1})

        resp = await http_client.post("/incidents", json={})

        assert resp.status == 500
        assert await resp.json() == {
            "error": "Random failure",
            "details": "Simulated random failure",
        }

    async def test_creation_disabled(self, http_client):
        """Test the stub response."""
        await http_client.put("/test/settings", json={"createTickets": False})

        resp = await http_client.post("/incidents", json={"shortDescription": "x"})

        assert resp.status == 201
        assert (await resp.json())["result"]["sys_id"] == "TEST_DISABLED"
        resp = await http_client.get("/test/tickets")
        assert (await resp.json())["count"] == 0

    async def test_malformed_body_passed_as_empty(self, http_client):
        """Test that a non-JSON body does not break creation."""
        resp = await http_client.post("/incidents", data="not json")

        assert resp.status == 201
        assert (await resp.json())["result"]["short_description"] is None

    async def test_unknown_charset_passed_as_empty(self, http_client):
        """Test that an undecodable charset does not break creation."""
        resp = await http_client.post(
            "/incidents",
            data=b'{"short_description": "disk full"}',
            headers={"Content-Type": "application/json; charset=bogus"}
        )

        assert resp.status == 201
        assert (await resp.json())["result"]["short_description"] is None

    async def test_unexpected_error_returns_500(self, http_client):
        """Test that an unusable setting turns into an internal error."""
        await http_client.put("/test/settings", json={"failureRate": "often"})

        resp = await http_client.post("/incidents", json={})

        assert resp.status == 500
        assert (await resp.json())["error"] == "Internal error"


@pytest.mark.asyncio
class TestControlEndpoints:
    """Test the test control endpoints."""

    async def test_get_settings(self, http_client):
        """Test reading the default settings."""
        resp = await http_client.get("/test/settings")

        assert resp.status == 200
        assert await resp.json() == {
            "createTickets": True,
            "responseDelay": 0,
            "failureRate": 0,
            "returnErrorCode": None,
        }

    async def test_put_settings_merges(self, http_client):
        """Test partial update."""
        resp = await http_client.put("/api/test/settings", json={"responseDelay": 10})

        assert resp.status == 200
        body = await resp.json()
        assert body["message"] == "Test settings updated"
        assert body["settings"]["responseDelay"] == 10
        assert body["settings"]["createTickets"] is True

    async def test_put_settings_rejects_non_object(self, http_client):
        """Test that a non-object settings body is a client error."""
        resp = await http_client.put("/test/settings", json=[1, 2, 3])

        assert resp.status == 400

    async def test_activate_scenario(self, http_client):
        """Test activating a scenario."""
        resp = await http_client.post("/api/test/scenario/service-down")

        assert resp.status == 200
        body = await resp.json()
        assert body["message"] == "Scenario 'service-down' activated"
        assert body["settings"]["returnErrorCode"] == 503

        resp = await http_client.post("/api/now/table/incident", json={})
        assert resp.status == 503

    async def test_unknown_scenario(self, http_client):
        """Test that unknown scenarios return 400 and change nothing."""
        resp = await http_client.post("/test/scenario/unknown-name")

        assert resp.status == 400
        assert await resp.json() == {"error": "Unknown scenario"}

        resp = await http_client.get("/test/settings")
        assert (await resp.json())["returnErrorCode"] is None

    async def test_list_scenarios(self, http_client):
        """Test listing scenario names."""
        resp = await http_client.get("/test/scenarios")

        assert "service-intermittent" in (await resp.json())["scenarios"]

    async def test_health(self, http_client):
        """Test the health snapshot."""
        await http_client.post("/incidents", json={})

        for path in ("/health", "/api/health"):
            resp = await http_client.get(path)
            assert resp.status == 200
            body = await resp.json()
            assert body["status"] == "healthy"
            assert body["ticketCount"] == 1
            assert body["settings"]["createTickets"] is True


@pytest.mark.asyncio
class TestMockServiceNowServer:
    """Test MockServiceNowServer lifecycle."""

    async def test_server_initialization(self):
        """Test that server initializes."""
        server = MockServiceNowServer(host="localhost", port=5555)

        assert server.host == "localhost"
        assert server.port == 5555
        assert not server.running

    async def test_server_start_stop(self, unused_tcp_port):
        """Test starting and stopping server."""
        simulator = ResponseSimulator(SettingsManager(initial_config={}))
        server = MockServiceNowServer(host="127.0.0.1", port=unused_tcp_port, simulator=simulator)

        await server.start()
        try:
            assert server.running
            assert server.get_server_info()["running"] is True
            with pytest.raises(RuntimeError):
                await server.start()
        finally:
            await server.stop()

        assert not server.running
        assert server.get_server_info()["running"] is False

    async def test_serve_forever_requires_start(self):
        """Test that serve_forever refuses to run before start."""
        server = MockServiceNowServer()

        with pytest.raises(RuntimeError):
            await server.serve_forever()
