from typing import Optional

from pydantic import BaseModel, Field

from Decido.share.enums.DecisionResult import DecisionResult


class TabulationOutcome(BaseModel):
    """
    一次计票评估的结论。
    result 为空表示结果尚未确定。
    """

    result: Optional[DecisionResult] = Field(None, description="已确定的结果")
    reason: str = Field(..., description="结论的说明")

    @property
    def is_terminal(self) -> bool:
        return self.result is not None
