from .DecisionError import DecisionError


class DecisionNotFound(DecisionError):
    def __init__(self, decision_id: int):
        super().__init__(f"未找到 ID 为 {decision_id} 的决策。")
        self.decision_id = decision_id
