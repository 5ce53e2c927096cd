"""Shared fixtures: a controllable clock and tmp_path-backed storage."""

from datetime import datetime, timedelta

import pytest

from cyber_sensei.progression.store import ProgressStore
from cyber_sensei.storage.kv_store import JsonFileStore
from cyber_sensei.storage.progress import ProgressRepository


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 3, 10, 12, 0, 0))


@pytest.fixture
def kv_store(tmp_path):
    return JsonFileStore(tmp_path / "progress")


@pytest.fixture
def repository(kv_store):
    return ProgressRepository(kv_store)


@pytest.fixture
def store(repository, clock):
    return ProgressStore(repository, clock=clock)
