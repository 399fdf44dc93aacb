"""
Errors raised by the mock ServiceNow simulator.

Simulated upstream errors are intentional outcomes, not bugs: they carry the
HTTP status and JSON body the caller is expected to receive.
"""

from typing import Any, Dict, Optional


class MockServiceNowError(Exception):
    """Base class for mock ServiceNow errors."""

    status: int = 500

    def __init__(self, message: str, body: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.body = body if body is not None else {"error": message}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON body sent to the caller."""
        return dict(self.body)


class SimulatedUpstreamError(MockServiceNowError):
    """Injected failure: a forced error code or a random failure."""

    def __init__(self, status: int, error: str, details: str):
        super().__init__(error, {"error": error, "details": details})
        self.status = status


class UnknownScenarioError(MockServiceNowError):
    """Raised when a scenario name is not recognised."""

    status = 400

    def __init__(self, name: str):
        super().__init__("Unknown scenario", {"error": "Unknown scenario"})
        self.name = name


class InvalidRequestError(MockServiceNowError):
    """Raised when a control request body cannot be used."""

    status = 400
