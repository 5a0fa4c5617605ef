from datetime import datetime

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from Decido.models.BaseModel import BaseModel
from Decido.share.TimeUtils import TimeUtils


class BallotEntry(BaseModel, table=True):
    """
    多数投票的选票，每个参与者只保留一张有效选票。
    """

    __tablename__ = "ballot_entry"  # type: ignore

    decision_id: int = Field(foreign_key="decision.id", index=True, description="关联的决策ID")
    actor_key: str = Field(description="投票者标识")
    proposal_id: int = Field(foreign_key="proposal.id", description="所选提案ID")
    updated_at: datetime = Field(default_factory=TimeUtils.utcnow, description="最后提交时间")

    __table_args__ = (
        UniqueConstraint(
            "decision_id",
            "actor_key",
            name="uk_ballot_decision_actor",
        ),
    )
