from datetime import datetime

import pytest
import pytest_asyncio

from Decido.dto.ActorRef import ActorRef
from Decido.engine.Lifecycle.DecisionLifecycle import DecisionLifecycle
from Decido.share.AppConfig import AppConfig
from Decido.share.Clock import FixedClock
from Decido.share.DatabaseHandler import DatabaseHandler

START = datetime(2025, 3, 3, 9, 0, 0)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(START)


@pytest.fixture
def config() -> AppConfig:
    return AppConfig(consent_min_duration_hours=24, default_timezone="UTC")


@pytest_asyncio.fixture
async def db_handler(tmp_path):
    handler = DatabaseHandler()
    handler.initialize(str(tmp_path / "decido.db"))
    await handler.init_db()
    yield handler
    await handler.close()


@pytest_asyncio.fixture
async def lifecycle(db_handler, clock, config) -> DecisionLifecycle:
    return DecisionLifecycle(db_handler, clock=clock, config=config)


@pytest.fixture
def creator() -> ActorRef:
    return ActorRef.member("creator", "发起人")


@pytest.fixture
def voters():
    return [ActorRef.member("alice"), ActorRef.member("bob"), ActorRef.member("carol")]
