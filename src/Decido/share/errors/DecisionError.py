class DecisionError(Exception):
    """
    决策引擎中所有可预期拒绝的基类。
    调用方可以统一捕获它并把消息返回给操作者。
    """

    def __init__(self, message: str = "操作被拒绝。"):
        super().__init__(message)
        self.message = message
