from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from Decido.models.BaseModel import BaseModel
from Decido.share.TimeUtils import TimeUtils


class ObjectionEntry(BaseModel, table=True):
    """
    同意式决策异议阶段的立场记录。
    vetoed_at 在第一次变为 OBJECTION 时写入，此后永不清除。
    """

    __tablename__ = "objection_entry"  # type: ignore

    decision_id: int = Field(foreign_key="decision.id", index=True, description="关联的决策ID")
    actor_key: str = Field(description="提交者标识")
    status: str = Field(description="NO_OBJECTION/OBJECTION/NO_POSITION")
    objection_text: Optional[str] = Field(default=None, description="异议理由，仅 OBJECTION 时必填")
    vetoed_at: Optional[datetime] = Field(default=None, description="首次提出异议的时间")
    updated_at: datetime = Field(default_factory=TimeUtils.utcnow, description="最后提交时间")

    __table_args__ = (
        UniqueConstraint(
            "decision_id",
            "actor_key",
            name="uk_objection_decision_actor",
        ),
    )
