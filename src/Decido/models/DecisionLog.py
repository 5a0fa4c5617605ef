from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import Column
from sqlmodel import Field

from Decido.models.BaseModel import BaseModel
from Decido.share.database_types import JSON_TYPE
from Decido.share.TimeUtils import TimeUtils


class DecisionLog(BaseModel, table=True):
    """
    决策历史表，只追加，与事件在同一事务中写入。
    """

    __tablename__ = "decision_log"  # type: ignore

    decision_id: int = Field(foreign_key="decision.id", index=True, description="关联的决策ID")
    event_type: str = Field(index=True, description="事件类型")
    actor_key: Optional[str] = Field(default=None, description="触发者标识，系统触发时为空")
    old_value: Optional[str] = Field(default=None, description="变更前的值")
    new_value: Optional[str] = Field(default=None, description="变更后的值")
    details: Optional[Dict[str, Any]] = Field(
        default=None, sa_column=Column(JSON_TYPE), description="附加信息"
    )
    created_at: datetime = Field(default_factory=TimeUtils.utcnow, description="记录时间")
