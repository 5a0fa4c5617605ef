import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from Decido.dto.ConsentStateDto import ConsentStateDto
from Decido.models.ConsentProposalState import ConsentProposalState
from Decido.share.enums.ConsentAmendmentAction import ConsentAmendmentAction

logger = logging.getLogger(__name__)


class ConsentService:
    """
    同意式决策提案状态 (`ConsentProposalState`) 的存取。
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_state(self, decision_id: int, initial_proposal: str) -> ConsentStateDto:
        state = ConsentProposalState(
            decision_id=decision_id,
            initial_proposal=initial_proposal,
            current_proposal=initial_proposal,
        )
        self.session.add(state)
        await self.session.flush()
        await self.session.refresh(state)
        return ConsentStateDto.model_validate(state)

    async def get_state(self, decision_id: int) -> Optional[ConsentStateDto]:
        statement = (
            select(ConsentProposalState)
            .where(ConsentProposalState.decision_id == decision_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(statement)
        state = result.one_or_none()
        if not state:
            return None
        return ConsentStateDto.model_validate(state)

    async def update_initial_proposal(self, decision_id: int, text: str) -> bool:
        """修改草稿阶段的初始提案文本。amendment_action 已写入后不再允许修改。"""
        statement = (
            update(ConsentProposalState)
            .where(
                ConsentProposalState.decision_id == decision_id,  # type: ignore
                ConsentProposalState.amendment_action.is_(None),  # type: ignore
            )
            .values(initial_proposal=text, current_proposal=text)
            .returning(ConsentProposalState.id)  # type: ignore
        )
        result = await self.session.exec(statement)  # type: ignore
        return result.scalar_one_or_none() is not None

    async def record_action(
        self,
        decision_id: int,
        action: ConsentAmendmentAction,
        now: datetime,
        amended_text: Optional[str] = None,
        implicit: bool = False,
    ) -> bool:
        """
        写入发起人的一次性决定。只有 amendment_action 仍为空时才会写入，
        因此两个并发的决定中只有一个能成功。

        Returns:
            写入成功返回 True；已存在决定时返回 False。
        """
        values = {
            "amendment_action": action.value,
            "amendment_implicit": implicit,
            "acted_at": now,
        }
        if action == ConsentAmendmentAction.AMENDED and amended_text is not None:
            values["current_proposal"] = amended_text

        statement = (
            update(ConsentProposalState)
            .where(
                ConsentProposalState.decision_id == decision_id,  # type: ignore
                ConsentProposalState.amendment_action.is_(None),  # type: ignore
            )
            .values(**values)
            .returning(ConsentProposalState.id)  # type: ignore
        )
        result = await self.session.exec(statement)  # type: ignore
        return result.scalar_one_or_none() is not None
