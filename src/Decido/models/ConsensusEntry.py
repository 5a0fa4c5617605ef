from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from Decido.models.BaseModel import BaseModel
from Decido.share.TimeUtils import TimeUtils


class ConsensusEntry(BaseModel, table=True):
    """
    一致同意投票记录: AGREE 或 DISAGREE，可覆盖。
    """

    __tablename__ = "consensus_entry"  # type: ignore

    decision_id: int = Field(foreign_key="decision.id", index=True, description="关联的决策ID")
    actor_key: str = Field(description="投票者标识")
    value: str = Field(description="AGREE/DISAGREE")
    comment: Optional[str] = Field(default=None, description="可选的说明")
    updated_at: datetime = Field(default_factory=TimeUtils.utcnow, description="最后提交时间")

    __table_args__ = (
        UniqueConstraint(
            "decision_id",
            "actor_key",
            name="uk_consensus_decision_actor",
        ),
    )
