"""Shared fixtures for the cell duel tests."""

from typing import List, Sequence, Tuple

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cellduel.duel_lock_manager import DuelLockManager
from cellduel.models.schemas import Base
from cellduel.services.duel_db import DuelService

START = 1_700_000_000_000


class ScriptedPicker:
    """Uniform picker replaced by a fixed sequence of targets."""

    def __init__(self, targets: Sequence[Tuple[int, int]] = ()):
        self.targets: List[Tuple[int, int]] = list(targets)
        self.seen: List[list] = []

    def pick(self, candidates):
        self.seen.append(list(candidates))
        target = self.targets.pop(0)
        assert target in candidates, f"{target} is not a zapper candidate"
        return target


class FakeClock:
    def __init__(self, now: int = START):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now


@pytest.fixture
def picker() -> ScriptedPicker:
    return ScriptedPicker()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'duel_test.sqlite3'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(autocommit=False, class_=AsyncSession, autoflush=True, bind=engine)

    await engine.dispose()


@pytest.fixture
def service(session_factory, picker, clock) -> DuelService:
    return DuelService(session_factory, picker=picker, lock_manager=DuelLockManager(), clock=clock)


@pytest_asyncio.fixture
async def started_duel(service):
    player1 = await service.create_player("alice")
    player2 = await service.create_player("bob")
    duel = await service.start_duel(player1.player_id, player2.player_id)
    return duel
