from datetime import datetime
from typing import Optional

from sqlmodel import Field

from Decido.share.BaseDto import BaseDto
from Decido.share.enums.ConsentStage import ConsentStage
from Decido.share.enums.ConsentStepMode import ConsentStepMode
from Decido.share.enums.DecisionResult import DecisionResult
from Decido.share.enums.DecisionStatus import DecisionStatus
from Decido.share.enums.DecisionType import DecisionType
from Decido.share.enums.NuancedScale import NuancedScale
from Decido.share.enums.VotingMode import VotingMode


class DecisionDto(BaseDto):
    """
    决策的数据传输对象，用于在服务层、引擎与调用方之间传递数据。
    """

    id: int = Field(..., description="决策的唯一标识符")
    title: str
    description: Optional[str] = None
    creator_key: str = Field(..., description="发起人的参与者标识")
    decision_type: DecisionType
    status: DecisionStatus
    voting_mode: VotingMode
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    result: Optional[DecisionResult] = None
    decided_at: Optional[datetime] = None
    conclusion: Optional[str] = None
    nuanced_scale: Optional[NuancedScale] = None
    nuanced_winner_count: int = 1
    consent_step_mode: Optional[ConsentStepMode] = None
    consent_current_stage: Optional[ConsentStage] = None
    lock_version: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_anonymous(self) -> bool:
        return self.voting_mode == VotingMode.PUBLIC_ANONYMOUS
