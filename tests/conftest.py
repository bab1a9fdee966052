import asyncio

import pytest

from core.models import HabitKind, UserSettings, make_habit
from database.memory import MemoryEntryStore

OWNER = "user-1"


class FlakyStore(MemoryEntryStore):
    """Хранилище, которое можно заставить падать на записи или чтении"""

    def __init__(self):
        super().__init__()
        self.fail_writes = False
        self.fail_reads = False
        self.fail_score = False
        self.upsert_calls = []
        self.read_delays = {}
        self.write_delay = 0

    async def upsert_entries(self, owner, entries):
        self.upsert_calls.append(list(entries))
        if self.write_delay:
            await asyncio.sleep(self.write_delay)
        if self.fail_writes:
            raise ConnectionError("network down")
        await super().upsert_entries(owner, entries)

    async def read_range(self, owner, start, end):
        delay = self.read_delays.get(str(start))
        if delay:
            await asyncio.sleep(delay)
        if self.fail_reads:
            raise ConnectionError("network down")
        return await super().read_range(owner, start, end)

    async def recalc_score(self, owner):
        if self.fail_score:
            raise RuntimeError("score service unavailable")
        return await super().recalc_score(owner)


@pytest.fixture
def owner():
    return OWNER


@pytest.fixture
def workout():
    return make_habit("Workout", HabitKind.TOGGLE, year_goal=156, sort=1)


@pytest.fixture
def reading():
    return make_habit("Reading", HabitKind.MINUTES, target_daily=30, year_goal=100, sort=2)


@pytest.fixture
def store():
    return MemoryEntryStore()


@pytest.fixture
def flaky_store():
    return FlakyStore()


@pytest.fixture
async def seeded_store(flaky_store, owner, workout, reading):
    await flaky_store.insert_habits(owner, [workout, reading])
    await flaky_store.update_settings(owner, **UserSettings().to_dict())
    return flaky_store
