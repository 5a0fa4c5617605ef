from typing import List, Optional

from Decido.share.BaseDto import BaseDto
from Decido.share.enums.DecisionResult import DecisionResult
from Decido.share.enums.DecisionStatus import DecisionStatus
from Decido.share.enums.DecisionType import DecisionType


class TallyDto(BaseDto):
    """各协议计票快照的公共部分。"""

    decision_id: int
    decision_type: DecisionType
    status: DecisionStatus
    result: Optional[DecisionResult] = None
    voters: Optional[List[str]] = None  # 匿名决策为 None
