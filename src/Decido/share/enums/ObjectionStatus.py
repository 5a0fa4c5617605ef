from enum import Enum


class ObjectionStatus(str, Enum):
    """同意式决策中参与者在异议阶段的立场"""

    NO_OBJECTION = "NO_OBJECTION"  # 无异议
    OBJECTION = "OBJECTION"  # 提出异议（否决）
    NO_POSITION = "NO_POSITION"  # 不表态
