import logging
from datetime import datetime
from typing import List, Optional

from Decido.dto.ConsentStateDto import ConsentStateDto
from Decido.dto.DecisionDto import DecisionDto
from Decido.share.enums.ConsentAmendmentAction import ConsentAmendmentAction
from Decido.share.enums.ConsentStage import ConsentStage
from Decido.share.enums.ConsentStepMode import ConsentStepMode
from Decido.share.enums.DecisionStatus import DecisionStatus

from .dto.ConsentResolution import ConsentResolution
from .dto.StageWindow import StageWindow
from .StageClock import StageClock

logger = logging.getLogger(__name__)


class ConsentWorkflow:
    """
    同意式决策的状态机。

    有效阶段是 (决策, 提案状态, 当前时间) 的纯函数:
        - 决策已结束、时钟已到终点或发起人撤回 -> TERMINEE
        - 发起人已修订或保持提案 -> 立即进入 OBJECTIONS
        - 时钟已进入 OBJECTIONS 而发起人没有作出决定 -> OBJECTIONS，并视为保持原提案
        - 其余情况下跟随时钟
    """

    def __init__(self, stage_clock: Optional[StageClock] = None):
        self.stage_clock = stage_clock or StageClock()

    def windows(self, decision: DecisionDto) -> List[StageWindow]:
        if decision.start_time is None or decision.end_time is None:
            return []
        return self.stage_clock.compute_stages(
            decision.start_time,
            decision.end_time,
            decision.consent_step_mode or ConsentStepMode.DISTINCT,
        )

    def resolve(
        self,
        decision: DecisionDto,
        state: Optional[ConsentStateDto],
        now: datetime,
    ) -> ConsentResolution:
        if decision.status == DecisionStatus.CLOSED:
            return ConsentResolution(
                stage=ConsentStage.TERMINEE, clock_stage=ConsentStage.TERMINEE
            )
        if decision.status == DecisionStatus.DRAFT:
            return ConsentResolution()

        clock_stage = StageClock.current_stage(now, self.windows(decision))
        if clock_stage is None:
            return ConsentResolution()
        if clock_stage == ConsentStage.TERMINEE:
            return ConsentResolution(stage=ConsentStage.TERMINEE, clock_stage=clock_stage)

        action = state.amendment_action if state else None
        if action == ConsentAmendmentAction.WITHDRAWN:
            return ConsentResolution(stage=ConsentStage.TERMINEE, clock_stage=clock_stage)
        if action in (ConsentAmendmentAction.AMENDED, ConsentAmendmentAction.KEPT):
            return ConsentResolution(stage=ConsentStage.OBJECTIONS, clock_stage=clock_stage)
        if clock_stage == ConsentStage.OBJECTIONS:
            return ConsentResolution(
                stage=ConsentStage.OBJECTIONS, clock_stage=clock_stage, implicit_keep=True
            )
        return ConsentResolution(stage=clock_stage, clock_stage=clock_stage)
