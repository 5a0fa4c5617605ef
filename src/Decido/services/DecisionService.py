import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import or_, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from Decido.models.Decision import Decision
from Decido.share.enums.DecisionResult import DecisionResult
from Decido.share.enums.DecisionStatus import DecisionStatus
from Decido.share.enums.DecisionType import DecisionType

logger = logging.getLogger(__name__)


class DecisionService:
    """
    提供处理决策 (`Decision`) 相关数据库操作的服务。
    状态迁移全部使用带条件的 UPDATE ... RETURNING，以保证并发下只有一个写入者成功。
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_decision(self, decision: Decision) -> Decision:
        self.session.add(decision)
        await self.session.flush()
        await self.session.refresh(decision)
        logger.debug(f"已创建决策 {decision.id}，类型 {decision.decision_type}")
        return decision

    async def get_by_id(self, decision_id: int) -> Optional[Decision]:
        """
        根据ID获取决策，总是从数据库重新加载，以反映本事务中条件更新的结果。
        """
        return await self.session.get(Decision, decision_id, populate_existing=True)

    async def lock_for_update(self, decision_id: int, now: datetime) -> bool:
        """
        递增决策的 lock_version。
        这是每个变更操作的第一条语句：它在读取任何数据之前取得数据库写锁，
        使同一决策上的所有写事务串行执行。

        Returns:
            决策存在时返回 True。
        """
        statement = (
            update(Decision)
            .where(Decision.id == decision_id)  # type: ignore
            .values(lock_version=Decision.lock_version + 1, updated_at=now)
            .returning(Decision.id)  # type: ignore
        )
        result = await self.session.exec(statement)  # type: ignore
        return result.scalar_one_or_none() is not None

    async def open_decision(
        self,
        decision_id: int,
        start_time: datetime,
        end_time: Optional[datetime],
        consent_stage: Optional[str],
    ) -> bool:
        """
        将决策从 DRAFT 切换为 OPEN。只有仍处于草稿状态的决策会被更新。
        """
        statement = (
            update(Decision)
            .where(
                Decision.id == decision_id,  # type: ignore
                Decision.status == DecisionStatus.DRAFT.value,  # type: ignore
            )
            .values(
                status=DecisionStatus.OPEN.value,
                start_time=start_time,
                end_time=end_time,
                consent_current_stage=consent_stage,
            )
            .returning(Decision.id)  # type: ignore
        )
        result = await self.session.exec(statement)  # type: ignore
        return result.scalar_one_or_none() is not None

    async def close_decision(
        self,
        decision_id: int,
        result: DecisionResult,
        decided_at: datetime,
        conclusion: Optional[str] = None,
        consent_stage: Optional[str] = None,
    ) -> bool:
        """
        将决策从 OPEN 切换为 CLOSED 并写入结果。

        Returns:
            本次调用完成了关闭时返回 True；决策已被其他写入者关闭时返回 False。
        """
        values = {
            "status": DecisionStatus.CLOSED.value,
            "result": result.value,
            "decided_at": decided_at,
        }
        if conclusion is not None:
            values["conclusion"] = conclusion
        if consent_stage is not None:
            values["consent_current_stage"] = consent_stage

        statement = (
            update(Decision)
            .where(
                Decision.id == decision_id,  # type: ignore
                Decision.status == DecisionStatus.OPEN.value,  # type: ignore
            )
            .values(**values)
            .returning(Decision.id)  # type: ignore
        )
        closed = await self.session.exec(statement)  # type: ignore
        return closed.scalar_one_or_none() is not None

    async def set_consent_stage(self, decision_id: int, stage: str):
        """更新缓存的同意式决策阶段。"""
        statement = (
            update(Decision)
            .where(Decision.id == decision_id)  # type: ignore
            .values(consent_current_stage=stage)
            .returning(Decision.id)  # type: ignore
        )
        await self.session.exec(statement)  # type: ignore

    async def get_sweep_candidate_ids(self, now: datetime) -> List[int]:
        """
        获取需要后台扫描的进行中决策:
        已到截止时间的决策，以及所有进行中的同意式决策（其阶段随时间推进）。
        """
        statement = (
            select(Decision.id)
            .where(
                Decision.status == DecisionStatus.OPEN.value,
                Decision.end_time.is_not(None),  # type: ignore
                Decision.decision_type != DecisionType.ADVICE_SOLICITATION.value,
                or_(
                    Decision.end_time <= now,  # type: ignore
                    Decision.decision_type == DecisionType.CONSENT.value,
                ),
            )
            .order_by(Decision.end_time)  # type: ignore
        )
        result = await self.session.exec(statement)
        return [decision_id for decision_id in result.all() if decision_id is not None]
