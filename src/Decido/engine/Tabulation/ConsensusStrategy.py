from typing import Dict, Optional

from Decido.dto.LedgerSnapshot import LedgerSnapshot
from Decido.share.enums.ConsensusVoteValue import ConsensusVoteValue
from Decido.share.enums.ConsentStage import ConsentStage
from Decido.share.enums.DecisionResult import DecisionResult
from Decido.share.enums.DecisionType import DecisionType

from .dto.ConsensusTally import ConsensusTally
from .dto.TabulationOutcome import TabulationOutcome
from .TabulationStrategy import TabulationStrategy


class ConsensusStrategy(TabulationStrategy):
    """
    一致同意: 全部有效参与者的最新记录都是 AGREE 时立即通过。
    任何 DISAGREE 都只会让决策保持进行中，不会直接否决。
    """

    decision_type = DecisionType.CONSENSUS

    def tally(
        self, snapshot: LedgerSnapshot, stage: Optional[ConsentStage] = None
    ) -> ConsensusTally:
        eligible = snapshot.eligible_keys
        latest: Dict[str, ConsensusVoteValue] = {
            entry.actor_key: entry.value
            for entry in snapshot.consensus_votes
            if entry.actor_key in eligible
        }
        agree = [k for k, v in latest.items() if v == ConsensusVoteValue.AGREE]
        disagree = [k for k, v in latest.items() if v == ConsensusVoteValue.DISAGREE]

        return ConsensusTally(
            **self._common_fields(snapshot, list(latest.keys())),
            eligible_count=len(eligible),
            agree_count=len(agree),
            disagree_count=len(disagree),
            pending_count=len(eligible) - len(latest),
            unanimous=bool(eligible) and len(agree) == len(eligible),
            disagreeing=[] if snapshot.decision.is_anonymous else sorted(disagree),
        )

    def evaluate(
        self, snapshot: LedgerSnapshot, stage: Optional[ConsentStage] = None
    ) -> TabulationOutcome:
        tally = self.tally(snapshot)
        if tally.unanimous:
            return TabulationOutcome(result=DecisionResult.APPROVED, reason="全体参与者一致同意")
        if tally.disagree_count:
            return TabulationOutcome(result=None, reason="存在不同意的参与者")
        return TabulationOutcome(result=None, reason="尚有参与者未表态")

    def deadline_outcome(self, snapshot: LedgerSnapshot) -> TabulationOutcome:
        if snapshot.consensus_votes:
            return TabulationOutcome(
                result=DecisionResult.REJECTED, reason="截止时间已到，未能达成一致"
            )
        return TabulationOutcome(result=DecisionResult.WITHDRAWN, reason="截止时间已到，无人表态")
