from enum import Enum


class VotingMode(str, Enum):
    """参与方式"""

    INVITED = "INVITED"  # 仅受邀参与者
    PUBLIC_ANONYMOUS = "PUBLIC_ANONYMOUS"  # 公开链接，匿名外部参与者
