from enum import Enum


class DecisionResult(str, Enum):
    """决策最终结果，仅在状态为 CLOSED 时存在"""

    APPROVED = "APPROVED"  # 通过
    REJECTED = "REJECTED"  # 否决
    BLOCKED = "BLOCKED"  # 被异议阻止
    WITHDRAWN = "WITHDRAWN"  # 已撤回
