from enum import Enum


class ConsentStage(str, Enum):
    """同意式决策的阶段"""

    CLARIFICATIONS = "CLARIFICATIONS"  # 澄清问题
    AVIS = "AVIS"  # 发表意见
    CLARIFAVIS = "CLARIFAVIS"  # 澄清与意见合并
    AMENDEMENTS = "AMENDEMENTS"  # 发起人修订
    OBJECTIONS = "OBJECTIONS"  # 异议
    TERMINEE = "TERMINEE"  # 已终结
