from enum import Enum


class DecisionType(str, Enum):
    """决策协议类型"""

    MAJORITY = "MAJORITY"  # 多数投票
    CONSENSUS = "CONSENSUS"  # 一致同意
    CONSENT = "CONSENT"  # 同意式决策（无异议即通过）
    NUANCED_VOTE = "NUANCED_VOTE"  # 多数判断（评价式投票）
    ADVICE_SOLICITATION = "ADVICE_SOLICITATION"  # 征求意见
