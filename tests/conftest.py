from typing import List

import pytest
import pytest_asyncio
from aiohttp.test_utils import TestClient, TestServer

from mock_servicenow.response_simulator import ResponseSimulator
from mock_servicenow.server import create_app
from mock_servicenow.settings_manager import SettingsManager, get_default_config


class FixedRandom:
    """Random source that always draws the same value."""

    def __init__(self, value: float) -> None:
        self.value = value
        self.draws = 0

    def random(self) -> float:
        self.draws += 1
        return self.value


class RecordingSleep:
    """Sleep stand-in that records requested delays and returns immediately."""

    def __init__(self) -> None:
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def settings_manager():
    return SettingsManager(initial_config=get_default_config())


@pytest.fixture
def fake_sleep():
    return RecordingSleep()


@pytest.fixture
def simulator(settings_manager, fake_sleep):
    # 0.99 never falls under a failure rate below 1
    return ResponseSimulator(settings_manager, rng=FixedRandom(0.99), sleep=fake_sleep)


@pytest_asyncio.fixture
async def http_client(simulator):
    client = TestClient(TestServer(create_app(simulator)))
    await client.start_server()
    try:
        yield client
    finally:
        await client.close()
