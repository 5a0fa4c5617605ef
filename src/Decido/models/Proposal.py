from typing import Optional

from sqlmodel import Field

from Decido.models.BaseModel import BaseModel


class Proposal(BaseModel, table=True):
    """
    提案表，多数投票与评价式投票中的候选项。
    决策开始后不可再修改。
    """

    __tablename__ = "proposal"  # type: ignore

    decision_id: int = Field(foreign_key="decision.id", index=True, description="关联的决策ID")
    title: str = Field(description="提案标题")
    description: Optional[str] = Field(default=None, description="提案说明")
    display_order: int = Field(default=0, description="显示顺序，也是排名中的稳定顺序")
