import asyncio
from datetime import datetime, timedelta

import pytest

from Decido.engine.Lifecycle.qo.CreateDecisionQo import CreateDecisionQo
from Decido.engine.Lifecycle.qo.LaunchDecisionQo import LaunchDecisionQo
from Decido.share.enums.ConsentAmendmentAction import ConsentAmendmentAction
from Decido.share.enums.ConsentStage import ConsentStage
from Decido.share.enums.ConsentStepMode import ConsentStepMode
from Decido.share.enums.DecisionLogEventType import DecisionLogEventType
from Decido.share.enums.DecisionResult import DecisionResult
from Decido.share.enums.DecisionStatus import DecisionStatus
from Decido.share.enums.DecisionType import DecisionType
from Decido.share.enums.ObjectionStatus import ObjectionStatus
from Decido.share.errors.AlreadyDecided import AlreadyDecided
from Decido.share.errors.IncompleteSubmission import IncompleteSubmission
from Decido.share.errors.InvalidConfiguration import InvalidConfiguration
from Decido.share.errors.NotEligible import NotEligible
from Decido.share.errors.StageClosed import StageClosed

START = datetime(2025, 3, 3, 9, 0, 0)
DAY = timedelta(days=1)
# 8 天的决策在 DISTINCT 模式下每个阶段 2 天:
# CLARIFICATIONS [0, 2) AVIS [2, 4) AMENDEMENTS [4, 6) OBJECTIONS [6, 8)
DURATION = DAY * 8


async def open_consent(lifecycle, creator, voters, step_mode=ConsentStepMode.DISTINCT):
    decision = await lifecycle.create_decision(
        creator,
        CreateDecisionQo(
            title="调整会费",
            decision_type=DecisionType.CONSENT,
            consent_step_mode=step_mode,
            initial_proposal="会费从每年 20 元调整为 25 元",
        ),
    )
    await lifecycle.register_participants(decision.id, voters)
    return await lifecycle.launch_decision(
        creator, decision.id, LaunchDecisionQo(end_time=START + DURATION)
    )


@pytest.mark.asyncio
async def test_launch_exposes_stage_windows(lifecycle, creator, voters):
    decision = await open_consent(lifecycle, creator, voters)
    assert decision.consent_current_stage == ConsentStage.CLARIFICATIONS

    windows = await lifecycle.get_stage_windows(decision.id)
    assert [w.stage for w in windows] == [
        ConsentStage.CLARIFICATIONS,
        ConsentStage.AVIS,
        ConsentStage.AMENDEMENTS,
        ConsentStage.OBJECTIONS,
    ]
    assert windows[0].start == START
    assert windows[-1].end == START + DURATION


@pytest.mark.asyncio
async def test_consent_launch_validation(lifecycle, creator):
    too_short = await lifecycle.create_decision(
        creator,
        CreateDecisionQo(
            title="太短", decision_type=DecisionType.CONSENT, initial_proposal="提案"
        ),
    )
    with pytest.raises(InvalidConfiguration):
        await lifecycle.launch_decision(
            creator, too_short.id, LaunchDecisionQo(end_time=START + timedelta(hours=12))
        )

    no_text = await lifecycle.create_decision(
        creator, CreateDecisionQo(title="无提案", decision_type=DecisionType.CONSENT)
    )
    with pytest.raises(InvalidConfiguration):
        await lifecycle.launch_decision(
            creator, no_text.id, LaunchDecisionQo(end_time=START + DURATION)
        )

    launched = await lifecycle.launch_decision(
        creator,
        no_text.id,
        LaunchDecisionQo(end_time=START + DURATION, initial_proposal="启动时补充的提案"),
    )
    state = await lifecycle.get_consent_state(launched.id)
    assert state.initial_proposal == "启动时补充的提案"
    assert state.current_proposal == "启动时补充的提案"


@pytest.mark.asyncio
async def test_clarification_questions_are_answered_once(lifecycle, clock, creator, voters):
    alice = voters[0]
    decision = await open_consent(lifecycle, creator, voters)

    question = await lifecycle.ask_clarification(alice, decision.id, "25 元包含保险吗？")
    assert question.answer is None

    with pytest.raises(StageClosed):
        await lifecycle.submit_opinion(alice, decision.id, "还在澄清阶段")
    with pytest.raises(NotEligible):
        await lifecycle.answer_clarification(alice, decision.id, question.id, "我来回答")

    # 回答可以延续到意见阶段
    clock.advance(DAY * 2)
    assert await lifecycle.current_stage(decision.id) == ConsentStage.AVIS
    with pytest.raises(StageClosed):
        await lifecycle.ask_clarification(alice, decision.id, "再问一个")

    answered = await lifecycle.answer_clarification(creator, decision.id, question.id, "包含")
    assert answered.answer == "包含"
    assert answered.answerer_key == creator.key

    with pytest.raises(AlreadyDecided):
        await lifecycle.answer_clarification(creator, decision.id, question.id, "不包含")
    with pytest.raises(IncompleteSubmission):
        await lifecycle.answer_clarification(creator, decision.id, 9999, "不存在的问题")

    tally = await lifecycle.submit_opinion(alice, decision.id, "支持")
    assert tally.stage == ConsentStage.AVIS
    assert tally.question_count == 1
    assert tally.unanswered_count == 0
    assert tally.opinion_count == 1


@pytest.mark.asyncio
async def test_merged_mode_accepts_questions_and_opinions_together(lifecycle, creator, voters):
    alice = voters[0]
    decision = await open_consent(lifecycle, creator, voters, ConsentStepMode.MERGED)
    assert decision.consent_current_stage == ConsentStage.CLARIFAVIS

    await lifecycle.ask_clarification(alice, decision.id, "什么时候生效？")
    tally = await lifecycle.submit_opinion(alice, decision.id, "同意")
    assert tally.question_count == 1
    assert tally.opinion_count == 1


@pytest.mark.asyncio
async def test_amendment_is_one_shot_and_opens_objections(lifecycle, clock, creator, voters):
    alice, bob, carol = voters
    decision = await open_consent(lifecycle, creator, voters)

    with pytest.raises(StageClosed):
        await lifecycle.amend_proposal(creator, decision.id, "太早了")

    clock.advance(DAY * 4)
    with pytest.raises(NotEligible):
        await lifecycle.keep_proposal(alice, decision.id)
    with pytest.raises(IncompleteSubmission):
        await lifecycle.amend_proposal(creator, decision.id, "   ")

    state = await lifecycle.amend_proposal(creator, decision.id, "会费调整为 24 元")
    assert state.amendment_action == ConsentAmendmentAction.AMENDED
    assert not state.amendment_implicit
    assert state.current_proposal == "会费调整为 24 元"
    assert state.initial_proposal == "会费从每年 20 元调整为 25 元"
    assert state.stage == ConsentStage.OBJECTIONS

    with pytest.raises(AlreadyDecided):
        await lifecycle.keep_proposal(creator, decision.id)
    with pytest.raises(AlreadyDecided):
        await lifecycle.withdraw_proposal(creator, decision.id)

    # 修订后立即进入异议阶段，无需等待时钟
    await lifecycle.submit_objection(alice, decision.id, ObjectionStatus.NO_OBJECTION)
    await lifecycle.submit_objection(bob, decision.id, ObjectionStatus.NO_POSITION)
    tally = await lifecycle.submit_objection(carol, decision.id, ObjectionStatus.NO_OBJECTION)

    assert tally.result == DecisionResult.APPROVED
    closed = await lifecycle.get_decision(decision.id)
    assert closed.status == DecisionStatus.CLOSED
    assert closed.consent_current_stage == ConsentStage.TERMINEE


@pytest.mark.asyncio
async def test_missed_amendment_window_is_kept_implicitly(lifecycle, clock, creator, voters):
    decision = await open_consent(lifecycle, creator, voters)

    clock.advance(DAY * 6)
    assert await lifecycle.sweep_decision(decision.id) is None

    state = await lifecycle.get_consent_state(decision.id)
    assert state.amendment_action == ConsentAmendmentAction.KEPT
    assert state.amendment_implicit
    assert state.stage == ConsentStage.OBJECTIONS
    assert state.current_proposal == state.initial_proposal

    with pytest.raises(AlreadyDecided):
        await lifecycle.amend_proposal(creator, decision.id, "来不及了")

    history = await lifecycle.get_history(decision.id)
    kept = [log for log in history if log.event_type == DecisionLogEventType.CONSENT_PROPOSAL_KEPT]
    assert len(kept) == 1
    assert kept[0].details == {"implicit": True}
    assert kept[0].actor_key is None


@pytest.mark.asyncio
async def test_single_objection_blocks(lifecycle, clock, creator, voters):
    alice, bob, _ = voters
    decision = await open_consent(lifecycle, creator, voters)

    with pytest.raises(StageClosed):
        await lifecycle.submit_objection(alice, decision.id, ObjectionStatus.OBJECTION, "反对")

    clock.advance(DAY * 6)
    await lifecycle.submit_objection(bob, decision.id, ObjectionStatus.NO_OBJECTION)
    with pytest.raises(IncompleteSubmission):
        await lifecycle.submit_objection(alice, decision.id, ObjectionStatus.OBJECTION)

    tally = await lifecycle.submit_objection(
        alice, decision.id, ObjectionStatus.OBJECTION, "预算不足"
    )
    assert tally.vetoed
    assert tally.result == DecisionResult.BLOCKED

    with pytest.raises(StageClosed):
        await lifecycle.submit_objection(alice, decision.id, ObjectionStatus.NO_OBJECTION)
    assert (await lifecycle.get_decision(decision.id)).result == DecisionResult.BLOCKED


@pytest.mark.asyncio
async def test_withdrawal_during_amendments(lifecycle, clock, creator, voters):
    decision = await open_consent(lifecycle, creator, voters)

    with pytest.raises(StageClosed):
        await lifecycle.withdraw_decision(creator, decision.id)

    clock.advance(DAY * 5)
    state = await lifecycle.withdraw_proposal(creator, decision.id)
    assert state.amendment_action == ConsentAmendmentAction.WITHDRAWN
    assert state.stage == ConsentStage.TERMINEE

    closed = await lifecycle.get_decision(decision.id)
    assert closed.status == DecisionStatus.CLOSED
    assert closed.result == DecisionResult.WITHDRAWN


@pytest.mark.asyncio
async def test_objection_window_end_approves(lifecycle, clock, creator, voters):
    alice = voters[0]
    decision = await open_consent(lifecycle, creator, voters)

    clock.advance(DAY * 4)
    await lifecycle.keep_proposal(creator, decision.id)
    await lifecycle.submit_objection(alice, decision.id, ObjectionStatus.NO_OBJECTION)
    assert (await lifecycle.get_decision(decision.id)).status == DecisionStatus.OPEN

    clock.advance(DAY * 4)
    assert await lifecycle.current_stage(decision.id) == ConsentStage.TERMINEE
    assert await lifecycle.sweep_decision(decision.id) == DecisionResult.APPROVED


@pytest.mark.asyncio
async def test_sweep_records_stage_changes(lifecycle, clock, creator, voters):
    decision = await open_consent(lifecycle, creator, voters)

    clock.advance(DAY * 2)
    await lifecycle.sweep_decision(decision.id)
    clock.advance(DAY * 2)
    await lifecycle.sweep_decision(decision.id)

    refreshed = await lifecycle.get_decision(decision.id)
    assert refreshed.consent_current_stage == ConsentStage.AMENDEMENTS

    changes = [
        (log.old_value, log.new_value)
        for log in await lifecycle.get_history(decision.id)
        if log.event_type == DecisionLogEventType.CONSENT_STAGE_CHANGED
    ]
    assert changes == [("CLARIFICATIONS", "AVIS"), ("AVIS", "AMENDEMENTS")]


# --- 并发 ---


@pytest.mark.asyncio
async def test_concurrent_creator_actions_apply_exactly_once(lifecycle, clock, creator, voters):
    decision = await open_consent(lifecycle, creator, voters)
    clock.advance(DAY * 4)

    results = await asyncio.gather(
        lifecycle.amend_proposal(creator, decision.id, "会费调整为 24 元"),
        lifecycle.keep_proposal(creator, decision.id),
        return_exceptions=True,
    )

    failures = [r for r in results if isinstance(r, Exception)]
    assert len(failures) == 1
    assert isinstance(failures[0], AlreadyDecided)

    state = await lifecycle.get_consent_state(decision.id)
    assert state.amendment_action in (
        ConsentAmendmentAction.AMENDED,
        ConsentAmendmentAction.KEPT,
    )
    assert (await lifecycle.get_decision(decision.id)).status == DecisionStatus.OPEN

    history = [log.event_type for log in await lifecycle.get_history(decision.id)]
    actions = [
        e
        for e in history
        if e
        in (
            DecisionLogEventType.CONSENT_PROPOSAL_AMENDED,
            DecisionLogEventType.CONSENT_PROPOSAL_KEPT,
        )
    ]
    assert len(actions) == 1


@pytest.mark.asyncio
async def test_concurrent_positions_close_the_decision_once(lifecycle, clock, creator, voters):
    decision = await open_consent(lifecycle, creator, voters)
    clock.advance(DAY * 4)
    await lifecycle.keep_proposal(creator, decision.id)

    await asyncio.gather(
        *(
            lifecycle.submit_objection(voter, decision.id, ObjectionStatus.NO_OBJECTION)
            for voter in voters
        )
    )

    closed = await lifecycle.get_decision(decision.id)
    assert closed.status == DecisionStatus.CLOSED
    assert closed.result == DecisionResult.APPROVED

    history = [log.event_type for log in await lifecycle.get_history(decision.id)]
    assert history.count(DecisionLogEventType.CLOSED) == 1
