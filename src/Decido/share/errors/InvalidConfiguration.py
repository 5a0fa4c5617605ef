from .DecisionError import DecisionError


class InvalidConfiguration(DecisionError):
    """决策配置无效，例如获胜数量超过提案数量。"""

    def __init__(self, message: str = "决策配置无效。"):
        super().__init__(message)
