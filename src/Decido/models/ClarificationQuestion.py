from datetime import datetime
from typing import Optional

from sqlmodel import Field

from Decido.models.BaseModel import BaseModel
from Decido.share.TimeUtils import TimeUtils


class ClarificationQuestion(BaseModel, table=True):
    """
    澄清问题表，只追加。
    回答只能由发起人填写一次。
    """

    __tablename__ = "clarification_question"  # type: ignore

    decision_id: int = Field(foreign_key="decision.id", index=True, description="关联的决策ID")
    asker_key: str = Field(description="提问者标识")
    question: str = Field(description="问题正文")
    answer: Optional[str] = Field(default=None, description="回答正文")
    answerer_key: Optional[str] = Field(default=None, description="回答者标识")
    answered_at: Optional[datetime] = Field(default=None, description="回答时间")
    created_at: datetime = Field(default_factory=TimeUtils.utcnow, description="提问时间")
