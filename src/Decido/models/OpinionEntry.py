from datetime import datetime

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from Decido.models.BaseModel import BaseModel
from Decido.share.TimeUtils import TimeUtils


class OpinionEntry(BaseModel, table=True):
    """
    意见记录（征求意见与同意式决策共用），可覆盖。
    """

    __tablename__ = "opinion_entry"  # type: ignore

    decision_id: int = Field(foreign_key="decision.id", index=True, description="关联的决策ID")
    actor_key: str = Field(description="提交者标识")
    content: str = Field(description="意见正文")
    updated_at: datetime = Field(default_factory=TimeUtils.utcnow, description="最后提交时间")

    __table_args__ = (
        UniqueConstraint(
            "decision_id",
            "actor_key",
            name="uk_opinion_decision_actor",
        ),
    )
