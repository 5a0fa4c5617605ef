from .DecisionError import DecisionError


class AlreadyDecided(DecisionError):
    """
    对只允许写入一次的字段进行第二次写入时抛出。
    """

    def __init__(self, message: str = "该操作已经完成，不能重复执行。"):
        super().__init__(message)
