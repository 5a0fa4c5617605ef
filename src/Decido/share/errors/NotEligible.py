from .DecisionError import DecisionError


class NotEligible(DecisionError):
    """
    当操作者不在该决策的有效参与者名单中（或不是发起人却执行了仅限发起人的操作）时抛出。
    """

    def __init__(self, message: str = "你不是该决策的有效参与者。"):
        super().__init__(message)
