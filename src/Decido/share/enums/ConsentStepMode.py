from enum import Enum


class ConsentStepMode(str, Enum):
    """同意式决策的阶段划分方式"""

    DISTINCT = "DISTINCT"  # 澄清、意见分开进行（4 个阶段）
    MERGED = "MERGED"  # 澄清与意见合并进行（3 个阶段）
