from collections import Counter
from typing import Optional

from Decido.dto.LedgerSnapshot import LedgerSnapshot
from Decido.share.enums.ConsentStage import ConsentStage
from Decido.share.enums.DecisionResult import DecisionResult
from Decido.share.enums.DecisionType import DecisionType

from .dto.PluralityTally import PluralityTally, ProposalCount
from .dto.TabulationOutcome import TabulationOutcome
from .TabulationStrategy import TabulationStrategy


class PluralityStrategy(TabulationStrategy):
    """
    多数投票: 每人一票，得票最多的提案获胜，平票时全部并列获胜。
    """

    decision_type = DecisionType.MAJORITY

    def tally(
        self, snapshot: LedgerSnapshot, stage: Optional[ConsentStage] = None
    ) -> PluralityTally:
        known_ids = {p.id for p in snapshot.proposals}
        ballots = snapshot.eligible_ballots
        counts = Counter(b.proposal_id for b in ballots if b.proposal_id in known_ids)
        total = sum(counts.values())

        proposals = [
            ProposalCount(
                proposal_id=p.id,
                title=p.title,
                count=counts.get(p.id, 0),
                percentage=round(counts.get(p.id, 0) * 100 / total, 1) if total else 0.0,
            )
            for p in snapshot.proposals
        ]

        winners = []
        if total:
            max_count = max(counts.values())
            winners = [p.proposal_id for p in proposals if p.count == max_count]

        return PluralityTally(
            **self._common_fields(snapshot, [b.actor_key for b in ballots]),
            total_ballots=total,
            proposals=proposals,
            winners=winners,
        )

    def evaluate(
        self, snapshot: LedgerSnapshot, stage: Optional[ConsentStage] = None
    ) -> TabulationOutcome:
        return TabulationOutcome(result=None, reason="多数投票在截止或撤回时结束")

    def deadline_outcome(self, snapshot: LedgerSnapshot) -> TabulationOutcome:
        if snapshot.eligible_ballots:
            return TabulationOutcome(result=DecisionResult.APPROVED, reason="截止时间已到，计票完成")
        return TabulationOutcome(result=DecisionResult.WITHDRAWN, reason="截止时间已到，无人投票")
