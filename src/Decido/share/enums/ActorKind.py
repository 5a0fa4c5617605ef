from enum import Enum


class ActorKind(str, Enum):
    """参与者身份类型"""

    MEMBER = "MEMBER"  # 组织内部成员
    EXTERNAL = "EXTERNAL"  # 持有令牌的外部参与者
