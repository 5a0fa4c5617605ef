from typing import Optional

from Decido.dto.LedgerSnapshot import LedgerSnapshot
from Decido.share.enums.ConsentAmendmentAction import ConsentAmendmentAction
from Decido.share.enums.ConsentStage import ConsentStage
from Decido.share.enums.DecisionResult import DecisionResult
from Decido.share.enums.DecisionType import DecisionType
from Decido.share.enums.ObjectionStatus import ObjectionStatus

from .dto.ConsentTally import ConsentTally
from .dto.TabulationOutcome import TabulationOutcome
from .TabulationStrategy import TabulationStrategy


class ConsentStrategy(TabulationStrategy):
    """
    同意式决策的结论判定，按以下顺序:
        1. 发起人撤回提案 -> WITHDRAWN
        2. 任何有效参与者曾经提出异议 -> BLOCKED（一票否决，且不可撤销）
        3. 全部有效参与者都提交了非异议立场 -> APPROVED
        4. 阶段时钟已到 TERMINEE -> APPROVED
    """

    decision_type = DecisionType.CONSENT

    def tally(
        self, snapshot: LedgerSnapshot, stage: Optional[ConsentStage] = None
    ) -> ConsentTally:
        eligible = snapshot.eligible_keys
        positions = {o.actor_key: o for o in snapshot.objections if o.actor_key in eligible}
        state = snapshot.consent_state

        def count(status: ObjectionStatus) -> int:
            return sum(1 for o in positions.values() if o.status == status)

        return ConsentTally(
            **self._common_fields(snapshot, list(positions.keys())),
            stage=stage,
            amendment_action=state.amendment_action if state else None,
            current_proposal=state.current_proposal if state else None,
            eligible_count=len(eligible),
            question_count=len(snapshot.questions),
            unanswered_count=sum(1 for q in snapshot.questions if q.answer is None),
            opinion_count=sum(1 for o in snapshot.opinions if o.actor_key in eligible),
            no_objection_count=count(ObjectionStatus.NO_OBJECTION),
            objection_count=count(ObjectionStatus.OBJECTION),
            no_position_count=count(ObjectionStatus.NO_POSITION),
            pending_count=len(eligible - set(positions)),
            vetoed=self._vetoed(snapshot),
        )

    def evaluate(
        self, snapshot: LedgerSnapshot, stage: Optional[ConsentStage] = None
    ) -> TabulationOutcome:
        state = snapshot.consent_state
        if state and state.amendment_action == ConsentAmendmentAction.WITHDRAWN:
            return TabulationOutcome(result=DecisionResult.WITHDRAWN, reason="发起人撤回了提案")

        if self._vetoed(snapshot):
            return TabulationOutcome(result=DecisionResult.BLOCKED, reason="有参与者提出了异议")

        eligible = snapshot.eligible_keys
        consenting = {
            o.actor_key
            for o in snapshot.objections
            if o.status != ObjectionStatus.OBJECTION and o.actor_key in eligible
        }
        if eligible and consenting == eligible:
            return TabulationOutcome(
                result=DecisionResult.APPROVED, reason="全部参与者均未提出异议"
            )

        if stage == ConsentStage.TERMINEE:
            return TabulationOutcome(
                result=DecisionResult.APPROVED, reason="异议阶段结束，无人提出异议"
            )

        return TabulationOutcome(result=None, reason="同意式决策仍在进行中")

    @staticmethod
    def _vetoed(snapshot: LedgerSnapshot) -> bool:
        eligible = snapshot.eligible_keys
        return any(
            o.vetoed_at is not None and o.actor_key in eligible for o in snapshot.objections
        )

    def deadline_outcome(self, snapshot: LedgerSnapshot) -> TabulationOutcome:
        return self.evaluate(snapshot, ConsentStage.TERMINEE)
