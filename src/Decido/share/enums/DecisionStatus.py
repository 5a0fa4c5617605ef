from enum import Enum


class DecisionStatus(str, Enum):
    """决策生命周期状态"""

    DRAFT = "DRAFT"  # 草稿
    OPEN = "OPEN"  # 进行中
    CLOSED = "CLOSED"  # 已结束
