from typing import Optional

from Decido.dto.LedgerSnapshot import LedgerSnapshot
from Decido.share.enums.ConsentStage import ConsentStage
from Decido.share.enums.DecisionType import DecisionType

from .dto.AdviceTally import AdviceTally
from .dto.TabulationOutcome import TabulationOutcome
from .TabulationStrategy import TabulationStrategy


class AdviceStrategy(TabulationStrategy):
    """
    征求意见: 只统计收集进度，从不自行产生结果。
    全部意见收齐后，发起人才可以写下结论并确认。
    """

    decision_type = DecisionType.ADVICE_SOLICITATION

    def tally(self, snapshot: LedgerSnapshot, stage: Optional[ConsentStage] = None) -> AdviceTally:
        solicited = snapshot.eligible_keys - {snapshot.decision.creator_key}
        received = {o.actor_key for o in snapshot.opinions if o.actor_key in solicited}
        pending = solicited - received

        return AdviceTally(
            **self._common_fields(snapshot, list(received)),
            received_count=len(received),
            total_solicited=len(solicited),
            all_received=len(received) == len(solicited) and len(solicited) > 0,
            pending=[] if snapshot.decision.is_anonymous else sorted(pending),
        )

    def evaluate(
        self, snapshot: LedgerSnapshot, stage: Optional[ConsentStage] = None
    ) -> TabulationOutcome:
        tally = self.tally(snapshot)
        if tally.all_received:
            return TabulationOutcome(result=None, reason="意见已全部收齐，等待发起人确认")
        return TabulationOutcome(
            result=None, reason=f"已收到 {tally.received_count}/{tally.total_solicited} 条意见"
        )
