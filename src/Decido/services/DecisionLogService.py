import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from Decido.dto.DecisionLogDto import DecisionLogDto
from Decido.models.DecisionLog import DecisionLog
from Decido.share.enums.DecisionLogEventType import DecisionLogEventType

logger = logging.getLogger(__name__)


class DecisionLogService:
    """
    决策历史的写入与查询。
    历史记录与触发它的事件处于同一事务中，事务回滚时一并消失。
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def record(
        self,
        decision_id: int,
        event_type: DecisionLogEventType,
        now: datetime,
        actor_key: Optional[str] = None,
        old_value: Optional[str] = None,
        new_value: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.session.add(
            DecisionLog(
                decision_id=decision_id,
                event_type=event_type.value,
                actor_key=actor_key,
                old_value=old_value,
                new_value=new_value,
                details=details,
                created_at=now,
            )
        )
        await self.session.flush()
        logger.debug(f"决策 {decision_id} 记录事件 {event_type.value} (actor={actor_key})")

    async def list_by_decision(self, decision_id: int) -> List[DecisionLogDto]:
        statement = (
            select(DecisionLog)
            .where(DecisionLog.decision_id == decision_id)
            .order_by(DecisionLog.id)  # type: ignore
        )
        result = await self.session.exec(statement)
        return [DecisionLogDto.model_validate(entry) for entry in result.all()]
