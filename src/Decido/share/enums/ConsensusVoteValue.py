from enum import Enum


class ConsensusVoteValue(str, Enum):
    """一致同意投票的取值"""

    AGREE = "AGREE"  # 同意
    DISAGREE = "DISAGREE"  # 不同意
