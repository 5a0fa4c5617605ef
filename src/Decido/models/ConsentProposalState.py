from datetime import datetime
from typing import Optional

from sqlmodel import Field

from Decido.models.BaseModel import BaseModel


class ConsentProposalState(BaseModel, table=True):
    """
    同意式决策的提案状态。
    amendment_action 由发起人写入一次，为空表示尚未决定。
    """

    __tablename__ = "consent_proposal_state"  # type: ignore

    decision_id: int = Field(
        foreign_key="decision.id", unique=True, index=True, description="关联的决策ID"
    )
    initial_proposal: str = Field(description="初始提案文本")
    current_proposal: str = Field(description="当前提案文本")
    amendment_action: Optional[str] = Field(default=None, description="AMENDED/KEPT/WITHDRAWN")
    amendment_implicit: bool = Field(
        default=False, description="是否为修订阶段到期后自动视为保持原提案"
    )
    acted_at: Optional[datetime] = Field(default=None, description="作出决定的时间")
