from enum import Enum


class ConsentAmendmentAction(str, Enum):
    """发起人在修订阶段的一次性决定"""

    AMENDED = "AMENDED"  # 已修订提案
    KEPT = "KEPT"  # 保持原提案
    WITHDRAWN = "WITHDRAWN"  # 撤回提案
