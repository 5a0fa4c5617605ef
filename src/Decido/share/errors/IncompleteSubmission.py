from .DecisionError import DecisionError


class IncompleteSubmission(DecisionError):
    """
    提交内容不完整或格式错误时抛出，例如评价式投票缺少某个提案的评语。
    """

    def __init__(self, message: str = "提交内容不完整。"):
        super().__init__(message)
