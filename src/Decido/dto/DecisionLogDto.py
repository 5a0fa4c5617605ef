from datetime import datetime
from typing import Any, Dict, Optional

from Decido.share.BaseDto import BaseDto
from Decido.share.enums.DecisionLogEventType import DecisionLogEventType


class DecisionLogDto(BaseDto):
    """决策历史中的一条事件记录"""

    id: int
    decision_id: int
    event_type: DecisionLogEventType
    actor_key: Optional[str] = None
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    created_at: datetime
