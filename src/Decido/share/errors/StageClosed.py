from .DecisionError import DecisionError


class StageClosed(DecisionError):
    """
    当决策的状态或同意式决策的当前阶段不允许该类型的提交时抛出。
    """

    def __init__(self, message: str = "当前阶段不接受此操作。"):
        super().__init__(message)
