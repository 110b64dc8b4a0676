"""
Pytest fixtures for the dairy back office.

Every test gets its own in-memory record store, a deterministic random
source and a clock it can move forward.
"""
import random
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

import main
from api import DairyApi
from auth import AuthGate
from database import MemoryRecordStore
from repository import DairyRepository


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 7, 15, 9, 30, tzinfo=timezone.utc))


@pytest.fixture
def store():
    return MemoryRecordStore()


@pytest.fixture
def repo(store, clock):
    return DairyRepository(store, clock=clock, rng=random.Random(7))


@pytest.fixture
def auth(repo, clock):
    return AuthGate(repo, clock=clock)


@pytest.fixture
def api(repo, auth):
    return DairyApi(repo, auth, latency=0, dashboard_latency=0)


@pytest.fixture
def client(api):
    main.app.dependency_overrides[main.get_api] = lambda: api
    with TestClient(main.app) as c:
        yield c
    main.app.dependency_overrides.clear()
