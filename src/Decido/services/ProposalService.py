import logging
from typing import List, Optional

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from Decido.dto.ProposalDto import ProposalDto
from Decido.models.Proposal import Proposal

logger = logging.getLogger(__name__)


class ProposalService:
    """
    提供处理提案 (`Proposal`) 相关数据库操作的服务。
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add_proposal(
        self, decision_id: int, title: str, description: Optional[str] = None
    ) -> ProposalDto:
        """
        为决策追加一个提案，显示顺序为当前提案数量。
        """
        display_order = await self.count_by_decision(decision_id)
        proposal = Proposal(
            decision_id=decision_id,
            title=title,
            description=description,
            display_order=display_order,
        )
        self.session.add(proposal)
        await self.session.flush()
        await self.session.refresh(proposal)
        return ProposalDto.model_validate(proposal)

    async def count_by_decision(self, decision_id: int) -> int:
        statement = select(func.count(Proposal.id)).where(  # type: ignore
            Proposal.decision_id == decision_id
        )
        result = await self.session.exec(statement)
        return result.one()

    async def list_by_decision(self, decision_id: int) -> List[ProposalDto]:
        """按显示顺序返回决策的全部提案。"""
        statement = (
            select(Proposal)
            .where(Proposal.decision_id == decision_id)
            .order_by(Proposal.display_order, Proposal.id)  # type: ignore
        )
        result = await self.session.exec(statement)
        return [ProposalDto.model_validate(p) for p in result.all()]
