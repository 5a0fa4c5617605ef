from datetime import datetime

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from Decido.models.BaseModel import BaseModel
from Decido.share.TimeUtils import TimeUtils


class MentionEntry(BaseModel, table=True):
    """
    评价式投票中某个参与者对某个提案的评语。
    同一参与者的全部评语构成一个完整的评语集，整体写入与整体替换。
    """

    __tablename__ = "mention_entry"  # type: ignore

    decision_id: int = Field(foreign_key="decision.id", index=True, description="关联的决策ID")
    actor_key: str = Field(description="投票者标识")
    proposal_id: int = Field(foreign_key="proposal.id", description="被评价的提案ID")
    mention: str = Field(description="评语，取值范围由决策的评语等级决定")
    updated_at: datetime = Field(default_factory=TimeUtils.utcnow, description="最后提交时间")

    __table_args__ = (
        UniqueConstraint(
            "decision_id",
            "actor_key",
            "proposal_id",
            name="uk_mention_decision_actor_proposal",
        ),
    )
