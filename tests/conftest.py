# tests/conftest.py
import os
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

os.environ["STORE_BACKEND"] = "memory"
os.environ["TEST_MODE"] = "1"

from pastebin.database import InMemoryStore
from pastebin.main import app as fastapi_app
from pastebin.service import PasteService, get_paste_service

# 2023-11-14T22:13:20.000Z
T0 = 1_700_000_000_000


class FixedClock:
    """Clock that only moves when a test moves it."""

    def __init__(self, now: int = T0):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture()
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture()
def service(store: InMemoryStore, clock: FixedClock) -> PasteService:
    return PasteService(store, clock=clock, base_url="http://test/")


@pytest.fixture()
def client(service: PasteService) -> Iterator[TestClient]:
    fastapi_app.dependency_overrides[get_paste_service] = lambda: service
    try:
        with TestClient(fastapi_app) as test_client:
            yield test_client
    finally:
        fastapi_app.dependency_overrides.pop(get_paste_service, None)
