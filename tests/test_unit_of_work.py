from datetime import datetime

import pytest

from Decido.models.Decision import Decision
from Decido.share.DatabaseHandler import DatabaseHandler
from Decido.share.enums.DecisionLogEventType import DecisionLogEventType
from Decido.share.UnitOfWork import UnitOfWork

NOW = datetime(2025, 3, 3, 9, 0, 0)


def new_decision(title: str) -> Decision:
    return Decision(
        title=title,
        creator_key="member:creator",
        decision_type="MAJORITY",
        voting_mode="INVITED",
        created_at=NOW,
        updated_at=NOW,
    )


@pytest.mark.asyncio
async def test_commit_on_clean_exit(db_handler):
    async with UnitOfWork(db_handler) as uow:
        decision = await uow.decision.create_decision(new_decision("提交"))
        decision_id = decision.id

    async with UnitOfWork(db_handler) as uow:
        assert await uow.decision.get_by_id(decision_id) is not None


@pytest.mark.asyncio
async def test_rollback_on_exception(db_handler):
    with pytest.raises(ValueError):
        async with UnitOfWork(db_handler) as uow:
            decision = await uow.decision.create_decision(new_decision("回滚"))
            decision_id = decision.id
            await uow.decision_log.record(decision_id, DecisionLogEventType.CREATED, NOW)
            raise ValueError("中途失败")

    async with UnitOfWork(db_handler) as uow:
        assert await uow.decision.get_by_id(decision_id) is None
        assert await uow.decision_log.list_by_decision(decision_id) == []


@pytest.mark.asyncio
async def test_services_share_the_session(db_handler):
    async with UnitOfWork(db_handler) as uow:
        assert uow.decision is uow.decision
        assert uow.ledger.session is uow.session
        assert uow.consent.session is uow.decision.session


def test_requires_handler_and_context():
    uow = UnitOfWork(None)
    with pytest.raises(RuntimeError):
        _ = uow.session


@pytest.mark.asyncio
async def test_uninitialized_handler_is_rejected():
    with pytest.raises(RuntimeError):
        async with UnitOfWork(DatabaseHandler()):
            pass
