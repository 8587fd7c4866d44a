"""Shared fixtures for dailybliss tests."""

import pytest

from dailybliss.center import BackendError
from dailybliss.config import Config


class FakeBackend:
    """Records posts instead of showing them."""

    name = "fake"

    def __init__(self, is_available: bool = True, fail: bool = False) -> None:
        self.is_available = is_available
        self.fail = fail
        self.posted: list[tuple[str, str, bool]] = []

    def available(self) -> bool:
        return self.is_available

    def post(self, title: str, body: str, sound: bool = True) -> None:
        if self.fail:
            raise BackendError("notifier exploded")
        self.posted.append((title, body, sound))


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "test.db"


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def config():
    return Config()
