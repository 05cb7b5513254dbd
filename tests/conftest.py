import os

# Must be set before importing app: the module-level config is read at import
# time, and tests must never write next to a real state or log file.
os.environ.setdefault("STATE_FILE", "counter-state.test.json")
os.environ.setdefault("LOG_FILE", "")

import pytest
from fastapi.testclient import TestClient

from app import app, get_service
from service import ProjectStateService
from store import StateStore
from tests.helpers import T0, FakeClock


@pytest.fixture
def clock():
    """A clock frozen at T0 that tests advance by hand."""
    return FakeClock(T0)


@pytest.fixture
def state_file(tmp_path):
    return tmp_path / "state.json"


@pytest.fixture
def store(state_file):
    return StateStore(state_file)


@pytest.fixture
def service(store, clock):
    return ProjectStateService(store, clock=clock)


@pytest.fixture
def client_for():
    """
    Builds a TestClient whose get_service dependency returns the given
    service instead of the one created by the startup hook.

    TestClient is used without the context manager so the startup event
    (which would load the configured STATE_FILE) never runs.
    """
    def make(service, raise_server_exceptions=True):
        async def override_get_service():
            return service

        app.dependency_overrides[get_service] = override_get_service
        return TestClient(app, raise_server_exceptions=raise_server_exceptions)

    yield make
    app.dependency_overrides.clear()


@pytest.fixture
def client(client_for, service):
    return client_for(service)
