from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from Decido.models.BaseModel import BaseModel


class Participant(BaseModel, table=True):
    """
    参与者表，由成员管理方提供的名单。
    每个 (决策, 参与者) 只有一条记录。
    """

    __tablename__ = "participant"  # type: ignore

    decision_id: int = Field(foreign_key="decision.id", index=True, description="关联的决策ID")
    actor_key: str = Field(index=True, description="参与者标识: member:<id> 或 external:<token>")
    actor_kind: str = Field(description="参与者类型: MEMBER/EXTERNAL")
    user_id: Optional[str] = Field(default=None, description="内部成员ID")
    external_token: Optional[str] = Field(default=None, description="外部参与者令牌")
    display_name: Optional[str] = Field(default=None, description="显示名称")
    is_eligible: bool = Field(default=True, description="是否有资格参与")
    has_voted: bool = Field(default=False, description="是否已提交过（仅供展示）")

    __table_args__ = (
        UniqueConstraint(
            "decision_id",
            "actor_key",
            name="uk_participant_decision_actor",
        ),
    )
