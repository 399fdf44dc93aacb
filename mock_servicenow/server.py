"""
Mock ServiceNow Server - aiohttp HTTP server implementation.

This module provides the MockServiceNowServer class that handles:
- The incident create endpoint shaped by the simulator
- Test control endpoints (tickets, settings, scenarios)
- Health checks
- Graceful startup and shutdown

Every route is served both in short form (/incidents, /test/..., /health)
and in the ServiceNow-compatible form under /api.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from aiohttp import web

from .errors import InvalidRequestError, MockServiceNowError
from .response_simulator import ResponseSimulator


# Configure logging
logger = logging.getLogger(__name__)

SIMULATOR_KEY = web.AppKey("simulator", ResponseSimulator)


async def _read_json(request: web.Request) -> Optional[Any]:
    """Read the JSON body, returning None when it is missing or malformed."""
    if not request.can_read_body:
        return None
    try:
        return await request.json()
    except (ValueError, LookupError):
        # Invalid JSON, undecodable bytes or an unknown charset
        return None


@web.middleware
async def error_middleware(request: web.Request, handler):
    """Convert simulator errors and unexpected exceptions into JSON responses."""
    try:
        return await handler(request)
    except MockServiceNowError as e:
        return web.json_response(e.to_dict(), status=e.status)
    except web.HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error processing {request.method} {request.path}")
        return web.json_response(
            {"error": "Internal error", "details": str(e)},
            status=500
        )


async def create_incident(request: web.Request) -> web.Response:
    """POST /incidents"""
    simulator = request.app[SIMULATOR_KEY]
    payload = await _read_json(request)
    logger.info(f"ServiceNow API called: {payload}")

    if not isinstance(payload, dict):
        payload = {}

    response = await simulator.handle_create(payload)
    return web.json_response(response.body, status=response.status)


async def get_tickets(request: web.Request) -> web.Response:
    """GET /test/tickets"""
    return web.json_response(request.app[SIMULATOR_KEY].list_tickets())


async def clear_tickets(request: web.Request) -> web.Response:
    """DELETE /test/tickets"""
    cleared = request.app[SIMULATOR_KEY].clear_tickets()
    return web.json_response({
        "message": f"Cleared {cleared} tickets",
        "remainingCount": 0
    })


async def get_settings(request: web.Request) -> web.Response:
    """GET /test/settings"""
    return web.json_response(request.app[SIMULATOR_KEY].get_settings())


async def update_settings(request: web.Request) -> web.Response:
    """PUT /test/settings"""
    partial = await _read_json(request)
    if not isinstance(partial, dict):
        raise InvalidRequestError("Settings body must be a JSON object")

    settings = request.app[SIMULATOR_KEY].update_settings(partial)
    return web.json_response({
        "message": "Test settings updated",
        "settings": settings
    })


async def activate_scenario(request: web.Request) -> web.Response:
    """POST /test/scenario/{name}"""
    name = request.match_info["name"]
    settings = request.app[SIMULATOR_KEY].activate_scenario(name)
    return web.json_response({
        "message": f"Scenario '{name}' activated",
        "settings": settings
    })


async def get_scenarios(request: web.Request) -> web.Response:
    """GET /test/scenarios"""
    return web.json_response({"scenarios": request.app[SIMULATOR_KEY].list_scenarios()})


async def health(request: web.Request) -> web.Response:
    """GET /health"""
    return web.json_response(request.app[SIMULATOR_KEY].health())


def _add_routes(app: web.Application, control_prefix: str, incident_path: str) -> None:
    app.router.add_post(incident_path, create_incident)
    app.router.add_get(f"{control_prefix}/test/tickets", get_tickets)
    app.router.add_delete(f"{control_prefix}/test/tickets", clear_tickets)
    app.router.add_get(f"{control_prefix}/test/settings", get_settings)
    app.router.add_put(f"{control_prefix}/test/settings", update_settings)
    app.router.add_post(f"{control_prefix}/test/scenario/{{name}}", activate_scenario)
    app.router.add_get(f"{control_prefix}/test/scenarios", get_scenarios)
    app.router.add_get(f"{control_prefix}/health", health)


def create_app(simulator: Optional[ResponseSimulator] = None) -> web.Application:
    """Create the aiohttp application.

    Args:
        simulator: Optional ResponseSimulator. Creates one if not provided.

    Returns:
        Configured web.Application.
    """
    app = web.Application(middlewares=[error_middleware])
    app[SIMULATOR_KEY] = simulator or ResponseSimulator()

    _add_routes(app, "", "/incidents")
    _add_routes(app, "/api", "/api/now/table/incident")
    return app


class MockServiceNowServer:
    """HTTP server for the mock ServiceNow API.

    This class handles:
    - Starting and stopping the aiohttp site
    - Serving until shutdown is requested
    - Reporting server information
    """

    def __init__(self, host: str = "localhost", port: int = 3000,
                 simulator: Optional[ResponseSimulator] = None):
        """Initialize the mock ServiceNow server.

        Args:
            host: Host address to bind to.
            port: Port number to listen on.
            simulator: Optional ResponseSimulator instance. Creates one if not provided.
        """
        self.host = host
        self.port = port
        self._simulator = simulator or ResponseSimulator()
        self._app = create_app(self._simulator)

        # Server state
        self._runner: Optional[web.AppRunner] = None
        self._running = False
        self._start_time: Optional[datetime] = None

        # Shutdown event
        self._shutdown_event = asyncio.Event()

    @property
    def running(self) -> bool:
        """Check if server is running."""
        return self._running

    @property
    def app(self) -> web.Application:
        return self._app

    @property
    def simulator(self) -> ResponseSimulator:
        return self._simulator

    async def start(self) -> None:
        """Start the HTTP server.

        Raises:
            RuntimeError: If server is already running.
            OSError: If port is already in use.
        """
        if self._running:
            raise RuntimeError("Server is already running")

        logger.info(f"Starting mock ServiceNow server on {self.host}:{self.port}")

        self._runner = web.AppRunner(self._app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port, reuse_address=True)

        try:
            await site.start()
        except OSError as e:
            logger.error(f"Failed to start server: {e}")
            await self._runner.cleanup()
            self._runner = None
            raise

        self._running = True
        self._start_time = datetime.now()
        self._shutdown_event.clear()

        logger.info(f"Mock ServiceNow API running on {self.host}:{self.port}")
        logger.info("API endpoints:")
        logger.info("   POST /api/now/table/incident (or /incidents) - Create ticket")
        logger.info("   GET  /api/test/tickets - View all tickets")
        logger.info("   DELETE /api/test/tickets - Clear all tickets")
        logger.info("   GET/PUT /api/test/settings - Test settings")
        logger.info("   POST /api/test/scenario/:name - Test scenarios")

    async def serve_forever(self) -> None:
        """Serve requests until shutdown is requested."""
        if not self._running:
            raise RuntimeError("Server not started. Call start() first.")

        await self._shutdown_event.wait()

    def request_shutdown(self) -> None:
        """Wake serve_forever so the caller can stop the server."""
        logger.info("Shutdown requested")
        self._shutdown_event.set()

    async def stop(self) -> None:
        """Stop the HTTP server gracefully."""
        if not self._running:
            logger.warning("Server is not running")
            return

        logger.info("Stopping mock ServiceNow server...")

        self._shutdown_event.set()
        self._running = False

        if self._runner:
            await self._runner.cleanup()
            self._runner = None

        logger.info("Mock ServiceNow server stopped")

    def get_server_info(self) -> Dict[str, Any]:
        """Get server information."""
        uptime = 0.0
        if self._start_time:
            uptime = (datetime.now() - self._start_time).total_seconds()

        return {
            "host": self.host,
            "port": self.port,
            "running": self._running,
            "uptime_seconds": uptime,
            "start_time": self._start_time.isoformat() if self._start_time else None
        }

