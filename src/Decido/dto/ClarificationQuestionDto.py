from datetime import datetime
from typing import Optional

from Decido.share.BaseDto import BaseDto


class ClarificationQuestionDto(BaseDto):
    id: int
    decision_id: int
    asker_key: str
    question: str
    answer: Optional[str] = None
    answerer_key: Optional[str] = None
    answered_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
