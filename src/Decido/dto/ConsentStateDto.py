from datetime import datetime
from typing import Optional

from Decido.share.BaseDto import BaseDto
from Decido.share.enums.ConsentAmendmentAction import ConsentAmendmentAction
from Decido.share.enums.ConsentStage import ConsentStage


class ConsentStateDto(BaseDto):
    """
    同意式决策的提案状态。
    stage 为计算出的当前阶段，由决策生命周期在返回前填充。
    """

    decision_id: int
    initial_proposal: str
    current_proposal: str
    amendment_action: Optional[ConsentAmendmentAction] = None
    amendment_implicit: bool = False
    acted_at: Optional[datetime] = None
    stage: Optional[ConsentStage] = None
