from datetime import datetime
from typing import Optional

from sqlmodel import Field, text

from Decido.models.BaseModel import BaseModel
from Decido.share.TimeUtils import TimeUtils


class Decision(BaseModel, table=True):
    """
    决策表，一条记录对应一次决策协议的运行。
    """

    __tablename__ = "decision"  # type: ignore

    title: str = Field(description="决策标题")
    description: Optional[str] = Field(default=None, description="决策说明")
    creator_key: str = Field(index=True, description="发起人的参与者标识")
    decision_type: str = Field(index=True, description="决策协议类型")
    status: str = Field(default="DRAFT", index=True, description="状态: DRAFT/OPEN/CLOSED")
    voting_mode: str = Field(default="INVITED", description="参与方式: INVITED/PUBLIC_ANONYMOUS")
    start_time: Optional[datetime] = Field(default=None, description="开始时间 (UTC)")
    end_time: Optional[datetime] = Field(
        default=None, index=True, description="截止时间 (UTC)，征求意见可为空"
    )
    result: Optional[str] = Field(default=None, description="最终结果，仅在 CLOSED 时存在")
    decided_at: Optional[datetime] = Field(default=None, description="结果产生时间")
    conclusion: Optional[str] = Field(default=None, description="征求意见的最终结论")

    # --- 协议相关配置 ---
    nuanced_scale: Optional[str] = Field(default=None, description="评价式投票的评语等级")
    nuanced_winner_count: int = Field(default=1, description="评价式投票的获胜数量")
    consent_step_mode: Optional[str] = Field(default=None, description="同意式决策的阶段划分方式")
    consent_current_stage: Optional[str] = Field(
        default=None, description="最近一次计算出的同意式决策阶段（仅作缓存）"
    )

    lock_version: int = Field(default=0, description="写锁版本号，每次变更操作递增")
    created_at: datetime = Field(
        default_factory=TimeUtils.utcnow,
        sa_column_kwargs={"server_default": text("CURRENT_TIMESTAMP")},
        description="创建时间",
    )
    updated_at: datetime = Field(
        default_factory=TimeUtils.utcnow,
        sa_column_kwargs={"server_default": text("CURRENT_TIMESTAMP")},
        description="最后更新时间",
    )
