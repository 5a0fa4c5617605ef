import asyncio
from datetime import datetime, timedelta

import pytest

from Decido.engine.Lifecycle.qo.AddProposalQo import AddProposalQo
from Decido.engine.Lifecycle.qo.CreateDecisionQo import CreateDecisionQo
from Decido.engine.Lifecycle.qo.LaunchDecisionQo import LaunchDecisionQo
from Decido.engine.Lifecycle.tasks.DecisionSweeper import DecisionSweeper
from Decido.share.enums.DecisionLogEventType import DecisionLogEventType
from Decido.share.enums.DecisionResult import DecisionResult
from Decido.share.enums.DecisionStatus import DecisionStatus
from Decido.share.enums.DecisionType import DecisionType
from Decido.share.errors.StageClosed import StageClosed

START = datetime(2025, 3, 3, 9, 0, 0)


async def launch_majority(lifecycle, creator, voters, hours):
    decision = await lifecycle.create_decision(
        creator, CreateDecisionQo(title=f"{hours} 小时", decision_type=DecisionType.MAJORITY)
    )
    proposal = await lifecycle.add_proposal(creator, decision.id, AddProposalQo(title="P1"))
    await lifecycle.register_participants(decision.id, voters)
    await lifecycle.launch_decision(
        creator, decision.id, LaunchDecisionQo(end_time=START + timedelta(hours=hours))
    )
    return decision.id, proposal.id


@pytest.mark.asyncio
async def test_run_once_closes_only_expired_decisions(lifecycle, clock, creator, voters):
    short_id, proposal_id = await launch_majority(lifecycle, creator, voters, 1)
    long_id, _ = await launch_majority(lifecycle, creator, voters, 48)
    await lifecycle.submit_ballot(voters[0], short_id, proposal_id)

    sweeper = DecisionSweeper(lifecycle, interval_minutes=1)
    assert await sweeper.run_once() == {}

    clock.advance(timedelta(hours=2))
    assert await sweeper.run_once() == {short_id: DecisionResult.APPROVED}
    assert (await lifecycle.get_decision(long_id)).status == DecisionStatus.OPEN

    # 已结束的决策不会被重复处理
    assert await sweeper.run_once() == {}


@pytest.mark.asyncio
async def test_run_once_accepts_explicit_time(lifecycle, creator, voters):
    decision_id, _ = await launch_majority(lifecycle, creator, voters, 1)
    sweeper = DecisionSweeper(lifecycle)

    closed = await sweeper.run_once(START + timedelta(hours=1))
    assert closed == {decision_id: DecisionResult.WITHDRAWN}


@pytest.mark.asyncio
async def test_failure_on_one_decision_does_not_stop_the_sweep(
    lifecycle, clock, creator, voters, monkeypatch
):
    first_id, _ = await launch_majority(lifecycle, creator, voters, 1)
    second_id, _ = await launch_majority(lifecycle, creator, voters, 1)
    clock.advance(timedelta(hours=1))

    original = lifecycle.sweep_decision

    async def flaky_sweep(decision_id, now=None):
        if decision_id == first_id:
            raise RuntimeError("数据库暂时不可用")
        return await original(decision_id, now)

    monkeypatch.setattr(lifecycle, "sweep_decision", flaky_sweep)
    closed = await DecisionSweeper(lifecycle).run_once()

    assert closed == {second_id: DecisionResult.WITHDRAWN}


@pytest.mark.asyncio
async def test_start_and_stop(lifecycle):
    sweeper = DecisionSweeper(lifecycle, interval_minutes=10)
    sweeper.start()
    assert sweeper._task is not None
    await sweeper.stop()
    assert sweeper._task is None


@pytest.mark.asyncio
async def test_sweep_racing_a_last_second_ballot(lifecycle, clock, creator, voters):
    decision_id, proposal_id = await launch_majority(lifecycle, creator, voters, 1)
    end_time = START + timedelta(hours=1)
    clock.set(end_time - timedelta(seconds=1))

    swept, ballot = await asyncio.gather(
        lifecycle.sweep_decision(decision_id, end_time),
        lifecycle.submit_ballot(voters[0], decision_id, proposal_id),
        return_exceptions=True,
    )

    closed = await lifecycle.get_decision(decision_id)
    assert closed.status == DecisionStatus.CLOSED
    tally = await lifecycle.get_tally(decision_id)
    if isinstance(ballot, Exception):
        # 扫描先拿到锁: 决策已结束，这张选票被拒绝
        assert isinstance(ballot, StageClosed)
        assert swept == DecisionResult.WITHDRAWN
        assert tally.total_ballots == 0
    else:
        assert swept == DecisionResult.APPROVED
        assert tally.total_ballots == 1
    assert closed.result == swept

    history = [log.event_type for log in await lifecycle.get_history(decision_id)]
    assert history.count(DecisionLogEventType.CLOSED) == 1
