from datetime import datetime

from Decido.dto.DecisionDto import DecisionDto
from Decido.dto.LedgerEntryDtos import (
    BallotEntryDto,
    ConsensusEntryDto,
    MentionEntryDto,
    ObjectionEntryDto,
    OpinionEntryDto,
)
from Decido.dto.LedgerSnapshot import LedgerSnapshot
from Decido.dto.ParticipantDto import ParticipantDto
from Decido.dto.ProposalDto import ProposalDto
from Decido.engine.Tabulation import get_strategy
from Decido.engine.Tabulation.ConsensusStrategy import ConsensusStrategy
from Decido.engine.Tabulation.ConsentStrategy import ConsentStrategy
from Decido.engine.Tabulation.MajorityJudgmentStrategy import MajorityJudgmentStrategy
from Decido.engine.Tabulation.PluralityStrategy import PluralityStrategy
from Decido.share.enums.ConsentStage import ConsentStage
from Decido.share.enums.DecisionResult import DecisionResult
from Decido.share.enums.DecisionType import DecisionType

NOW = datetime(2025, 3, 3, 12, 0, 0)


def make_snapshot(decision_type, participants=None, proposals=0, **kwargs):
    if participants is None:
        # 默认名单: a、b、c 以及选票和评语中出现的全部投票者
        entries = [*kwargs.get("ballots", []), *kwargs.get("mentions", [])]
        participants = ("a", "b", "c") + tuple(sorted({e.actor_key for e in entries}))
    decision_fields = {
        "id": 1,
        "title": "测试决策",
        "creator_key": "member:creator",
        "decision_type": decision_type,
        "status": "OPEN",
        "voting_mode": kwargs.pop("voting_mode", "INVITED"),
        "nuanced_scale": kwargs.pop("nuanced_scale", None),
        "nuanced_winner_count": kwargs.pop("winner_count", 1),
    }
    return LedgerSnapshot(
        decision=DecisionDto(**decision_fields),
        proposals=[
            ProposalDto(id=i + 1, decision_id=1, title=f"P{i + 1}", display_order=i)
            for i in range(proposals)
        ],
        participants=[
            ParticipantDto(
                id=i + 1,
                decision_id=1,
                actor_key=key,
                actor_kind="MEMBER",
                is_eligible=True,
                has_voted=False,
            )
            for i, key in enumerate(participants)
        ],
        **kwargs,
    )


def ballots(*choices):
    return [
        BallotEntryDto(actor_key=f"voter{i}", proposal_id=choice) for i, choice in enumerate(choices)
    ]


def mention_sets(*sets):
    """sets 中每个元素为一名投票者对各提案的评语列表，按提案 ID 顺序排列。"""
    return [
        MentionEntryDto(actor_key=f"voter{i}", proposal_id=pid + 1, mention=mention)
        for i, mentions in enumerate(sets)
        for pid, mention in enumerate(mentions)
    ]


# --- 多数投票 ---


def test_plurality_scenario_two_to_one():
    snapshot = make_snapshot("MAJORITY", proposals=2, ballots=ballots(1, 1, 2))
    tally = PluralityStrategy().tally(snapshot)

    counts = {p.proposal_id: (p.count, p.percentage) for p in tally.proposals}
    assert counts == {1: (2, 66.7), 2: (1, 33.3)}
    assert tally.winners == [1]
    assert tally.total_ballots == 3


def test_plurality_ties_produce_multiple_winners():
    snapshot = make_snapshot("MAJORITY", proposals=3, ballots=ballots(1, 2, 3, 1, 2))
    tally = PluralityStrategy().tally(snapshot)

    assert tally.winners == [1, 2]
    assert abs(sum(p.percentage for p in tally.proposals) - 100) < 0.2


def test_plurality_empty_input_is_neutral():
    strategy = PluralityStrategy()
    snapshot = make_snapshot("MAJORITY", proposals=2)
    tally = strategy.tally(snapshot)

    assert tally.total_ballots == 0
    assert tally.winners == []
    assert all(p.percentage == 0.0 for p in tally.proposals)
    assert strategy.evaluate(snapshot).result is None
    assert strategy.deadline_outcome(snapshot).result == DecisionResult.WITHDRAWN


def test_plurality_never_closes_early_and_approves_at_deadline():
    strategy = PluralityStrategy()
    snapshot = make_snapshot("MAJORITY", proposals=2, ballots=ballots(1, 2, 2))

    assert strategy.evaluate(snapshot).result is None
    assert strategy.deadline_outcome(snapshot).result == DecisionResult.APPROVED


def test_plurality_hides_voters_for_anonymous_decisions():
    snapshot = make_snapshot(
        "MAJORITY", proposals=1, ballots=ballots(1), voting_mode="PUBLIC_ANONYMOUS"
    )
    assert PluralityStrategy().tally(snapshot).voters is None

    snapshot = make_snapshot("MAJORITY", proposals=1, ballots=ballots(1))
    assert PluralityStrategy().tally(snapshot).voters == ["voter0"]


def test_plurality_ignores_ballots_from_non_eligible_actors():
    strategy = PluralityStrategy()
    snapshot = make_snapshot(
        "MAJORITY", participants=("voter1",), proposals=2, ballots=ballots(1, 2)
    )
    tally = strategy.tally(snapshot)

    assert tally.total_ballots == 1
    assert tally.winners == [2]
    assert tally.voters == ["voter1"]

    only_outsiders = make_snapshot("MAJORITY", participants=("a",), proposals=1, ballots=ballots(1))
    assert strategy.deadline_outcome(only_outsiders).result == DecisionResult.WITHDRAWN


# --- 一致同意 ---


def consensus(**votes):
    return [ConsensusEntryDto(actor_key=k, value=v) for k, v in votes.items()]


def test_consensus_unanimous_agree_is_approved():
    snapshot = make_snapshot("CONSENSUS", consensus_votes=consensus(a="AGREE", b="AGREE", c="AGREE"))
    outcome = ConsensusStrategy().evaluate(snapshot)
    assert outcome.result == DecisionResult.APPROVED


def test_consensus_single_disagree_keeps_open():
    snapshot = make_snapshot(
        "CONSENSUS", consensus_votes=consensus(a="AGREE", b="AGREE", c="DISAGREE")
    )
    strategy = ConsensusStrategy()

    assert strategy.evaluate(snapshot).result is None
    assert strategy.tally(snapshot).disagreeing == ["c"]
    assert strategy.deadline_outcome(snapshot).result == DecisionResult.REJECTED


def test_consensus_requires_every_eligible_participant():
    snapshot = make_snapshot("CONSENSUS", consensus_votes=consensus(a="AGREE", b="AGREE"))
    tally = ConsensusStrategy().tally(snapshot)

    assert not tally.unanimous
    assert tally.pending_count == 1


def test_consensus_ignores_entries_from_non_eligible_actors():
    snapshot = make_snapshot(
        "CONSENSUS",
        participants=("a",),
        consensus_votes=consensus(a="AGREE", outsider="DISAGREE"),
    )
    assert ConsensusStrategy().evaluate(snapshot).result == DecisionResult.APPROVED


def test_consensus_with_empty_eligible_set_is_never_approved():
    snapshot = make_snapshot("CONSENSUS", participants=())
    strategy = ConsensusStrategy()
    assert strategy.evaluate(snapshot).result is None
    assert strategy.deadline_outcome(snapshot).result == DecisionResult.WITHDRAWN


# --- 评价式投票 ---


def test_majority_mention_of_good_good_insufficient_is_good():
    snapshot = make_snapshot(
        "NUANCED_VOTE",
        proposals=1,
        nuanced_scale="5_LEVELS",
        mentions=mention_sets(["GOOD"], ["GOOD"], ["INSUFFICIENT"]),
    )
    tally = MajorityJudgmentStrategy().tally(snapshot)

    result = tally.results[0]
    assert result.majority_mention == "GOOD"
    assert result.mention_counts["GOOD"] == 2
    assert result.mention_counts["INSUFFICIENT"] == 1
    assert tally.winners == [1]


def test_majority_mention_uses_lower_median_for_even_counts():
    snapshot = make_snapshot(
        "NUANCED_VOTE",
        proposals=1,
        nuanced_scale="5_LEVELS",
        mentions=mention_sets(["EXCELLENT"], ["GOOD"], ["PASSABLE"], ["TO_REJECT"]),
    )
    result = MajorityJudgmentStrategy().tally(snapshot).results[0]
    assert result.majority_mention == "PASSABLE"


def test_majority_judgment_ranks_by_mention_then_share():
    # P1: [GOOD, GOOD, PASSABLE] -> GOOD，高于 0，低于 1/3
    # P2: [EXCELLENT, GOOD, GOOD] -> GOOD，高于 1/3，低于 0
    # P3: [PASSABLE, PASSABLE, PASSABLE] -> PASSABLE
    snapshot = make_snapshot(
        "NUANCED_VOTE",
        proposals=3,
        nuanced_scale="5_LEVELS",
        mentions=mention_sets(
            ["GOOD", "EXCELLENT", "PASSABLE"],
            ["GOOD", "GOOD", "PASSABLE"],
            ["PASSABLE", "GOOD", "PASSABLE"],
        ),
    )
    tally = MajorityJudgmentStrategy().tally(snapshot)

    assert [r.proposal_id for r in tally.results] == [2, 1, 3]
    assert [r.rank for r in tally.results] == [1, 2, 3]
    assert tally.winners == [2]


def test_majority_judgment_includes_all_ties_at_cutoff():
    snapshot = make_snapshot(
        "NUANCED_VOTE",
        proposals=3,
        nuanced_scale="3_LEVELS",
        winner_count=1,
        mentions=mention_sets(
            ["GOOD", "GOOD", "INSUFFICIENT"],
            ["PASSABLE", "PASSABLE", "INSUFFICIENT"],
            ["GOOD", "GOOD", "PASSABLE"],
        ),
    )
    tally = MajorityJudgmentStrategy().tally(snapshot)

    assert tally.winners == [1, 2]
    assert len(tally.winners) >= tally.winner_count
    assert [r.rank for r in tally.results] == [1, 1, 3]


def test_majority_judgment_swap_away_from_median_keeps_mention():
    base = make_snapshot(
        "NUANCED_VOTE",
        proposals=2,
        nuanced_scale="5_LEVELS",
        mentions=mention_sets(
            ["EXCELLENT", "GOOD"], ["GOOD", "EXCELLENT"], ["PASSABLE", "PASSABLE"]
        ),
    )
    tally = MajorityJudgmentStrategy().tally(base)
    mentions = {r.proposal_id: r.majority_mention for r in tally.results}
    assert mentions == {1: "GOOD", 2: "GOOD"}


def test_majority_judgment_ignores_mentions_from_non_eligible_actors():
    snapshot = make_snapshot(
        "NUANCED_VOTE",
        participants=("voter0", "voter2"),
        proposals=1,
        nuanced_scale="5_LEVELS",
        mentions=mention_sets(["EXCELLENT"], ["TO_REJECT"], ["EXCELLENT"]),
    )
    tally = MajorityJudgmentStrategy().tally(snapshot)

    assert tally.voter_count == 2
    assert tally.results[0].majority_mention == "EXCELLENT"
    assert tally.results[0].mention_counts["TO_REJECT"] == 0


def test_majority_judgment_empty_input_has_no_winner():
    strategy = MajorityJudgmentStrategy()
    snapshot = make_snapshot("NUANCED_VOTE", proposals=2, nuanced_scale="7_LEVELS")
    tally = strategy.tally(snapshot)

    assert tally.winners == []
    assert all(r.majority_mention is None for r in tally.results)
    assert strategy.evaluate(snapshot).result is None
    assert strategy.deadline_outcome(snapshot).result == DecisionResult.WITHDRAWN


# --- 征求意见 ---


def test_advice_excludes_creator_from_solicited_set():
    snapshot = make_snapshot(
        "ADVICE_SOLICITATION",
        participants=("member:creator", "a", "b"),
        opinions=[OpinionEntryDto(actor_key="a", content="同意")],
    )
    strategy = get_strategy(DecisionType.ADVICE_SOLICITATION)
    tally = strategy.tally(snapshot)

    assert tally.total_solicited == 2
    assert tally.received_count == 1
    assert not tally.all_received
    assert tally.pending == ["b"]


def test_advice_never_produces_a_result():
    snapshot = make_snapshot(
        "ADVICE_SOLICITATION",
        participants=("a",),
        opinions=[OpinionEntryDto(actor_key="a", content="可以")],
    )
    strategy = get_strategy(DecisionType.ADVICE_SOLICITATION)

    assert strategy.tally(snapshot).all_received
    assert strategy.evaluate(snapshot).result is None
    assert strategy.deadline_outcome(snapshot).result is None


def test_advice_with_nobody_solicited_is_not_complete():
    snapshot = make_snapshot("ADVICE_SOLICITATION", participants=("member:creator",))
    assert not get_strategy(DecisionType.ADVICE_SOLICITATION).tally(snapshot).all_received


# --- 同意式决策 ---


def objection(key, status, vetoed=False):
    return ObjectionEntryDto(actor_key=key, status=status, vetoed_at=NOW if vetoed else None)


def test_consent_single_objection_blocks():
    snapshot = make_snapshot(
        "CONSENT",
        objections=[objection("a", "OBJECTION", vetoed=True)],
    )
    outcome = ConsentStrategy().evaluate(snapshot, ConsentStage.OBJECTIONS)
    assert outcome.result == DecisionResult.BLOCKED


def test_consent_veto_is_sticky_after_changing_position():
    snapshot = make_snapshot(
        "CONSENT",
        objections=[
            objection("a", "NO_OBJECTION", vetoed=True),
            objection("b", "NO_OBJECTION"),
            objection("c", "NO_OBJECTION"),
        ],
    )
    outcome = ConsentStrategy().evaluate(snapshot, ConsentStage.OBJECTIONS)
    assert outcome.result == DecisionResult.BLOCKED


def test_consent_all_non_objection_is_approved():
    snapshot = make_snapshot(
        "CONSENT",
        objections=[
            objection("a", "NO_OBJECTION"),
            objection("b", "NO_POSITION"),
            objection("c", "NO_OBJECTION"),
        ],
    )
    outcome = ConsentStrategy().evaluate(snapshot, ConsentStage.OBJECTIONS)
    assert outcome.result == DecisionResult.APPROVED


def test_consent_partial_positions_wait_until_terminee():
    snapshot = make_snapshot("CONSENT", objections=[objection("a", "NO_OBJECTION")])
    strategy = ConsentStrategy()

    assert strategy.evaluate(snapshot, ConsentStage.OBJECTIONS).result is None
    assert strategy.evaluate(snapshot, ConsentStage.TERMINEE).result == DecisionResult.APPROVED
    assert strategy.tally(snapshot, ConsentStage.OBJECTIONS).pending_count == 2


def test_consent_veto_from_non_eligible_actor_is_ignored():
    snapshot = make_snapshot(
        "CONSENT",
        participants=("a", "b"),
        objections=[
            objection("a", "NO_OBJECTION"),
            objection("b", "NO_OBJECTION"),
            objection("c", "OBJECTION", vetoed=True),
        ],
    )
    strategy = ConsentStrategy()

    assert not strategy.tally(snapshot, ConsentStage.OBJECTIONS).vetoed
    assert strategy.evaluate(snapshot, ConsentStage.OBJECTIONS).result == DecisionResult.APPROVED
