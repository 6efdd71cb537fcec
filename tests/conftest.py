import random
from datetime import datetime, timedelta

import pytest

from m2pos.data import default_menu
from m2pos.persistence import KeyValueStore, PosStorage
from m2pos.pos_state import PosState


class FakeClock:
    """Deterministic clock that advances one second per reading."""

    def __init__(self, start):
        self.current = start

    def __call__(self):
        value = self.current
        self.current = value + timedelta(seconds=1)
        return value


@pytest.fixture(scope='function')
def clock():
    """Local-time clock pinned to a fixed afternoon."""
    return FakeClock(datetime(2026, 10, 17, 14, 5).astimezone())


@pytest.fixture(scope='function')
def storage(tmp_path):
    """Storage backed by a throwaway SQLite file."""
    return PosStorage(KeyValueStore(tmp_path / 'pos.db'))


@pytest.fixture(scope='function')
def state(storage, clock):
    """Session state with seed menu, fixed clock and seeded RNG."""
    return PosState(storage=storage, clock=clock, rng=random.Random(7))


@pytest.fixture(scope='function')
def menu():
    """Seed menu keyed by item id."""
    return {item.id: item for item in default_menu()}
