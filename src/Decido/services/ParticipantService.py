import logging
from typing import List, Optional, Tuple

from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from Decido.dto.ActorRef import ActorRef
from Decido.dto.ParticipantDto import ParticipantDto
from Decido.models.Participant import Participant
from Decido.share.enums.ActorKind import ActorKind

logger = logging.getLogger(__name__)


class ParticipantService:
    """
    参与者名单的存取。
    名单本身由外部的成员管理方维护，这里只负责保存与查询。
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_participant(self, decision_id: int, actor_key: str) -> Optional[ParticipantDto]:
        statement = select(Participant).where(
            Participant.decision_id == decision_id, Participant.actor_key == actor_key
        )
        result = await self.session.exec(statement)
        participant = result.one_or_none()
        if not participant:
            return None
        return ParticipantDto.model_validate(participant)

    async def register(
        self, decision_id: int, actor: ActorRef, is_eligible: bool = True
    ) -> Tuple[ParticipantDto, bool]:
        """
        登记一个参与者。已存在时更新其显示名称与资格。

        Returns:
            (参与者, 是否为新建记录)
        """
        statement = select(Participant).where(
            Participant.decision_id == decision_id, Participant.actor_key == actor.key
        )
        result = await self.session.exec(statement)
        participant = result.one_or_none()
        created = participant is None

        if participant is None:
            participant = Participant(
                decision_id=decision_id,
                actor_key=actor.key,
                actor_kind=actor.kind.value,
                user_id=actor.id if actor.kind == ActorKind.MEMBER else None,
                external_token=actor.id if actor.kind == ActorKind.EXTERNAL else None,
                display_name=actor.display_name,
                is_eligible=is_eligible,
            )
            self.session.add(participant)
        else:
            participant.is_eligible = is_eligible
            if actor.display_name:
                participant.display_name = actor.display_name

        await self.session.flush()
        await self.session.refresh(participant)
        return ParticipantDto.model_validate(participant), created

    async def list_eligible(self, decision_id: int) -> List[ParticipantDto]:
        statement = (
            select(Participant)
            .where(Participant.decision_id == decision_id, Participant.is_eligible == True)  # noqa: E712
            .order_by(Participant.id)  # type: ignore
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(statement)
        return [ParticipantDto.model_validate(p) for p in result.all()]

    async def mark_has_voted(self, decision_id: int, actor_key: str) -> bool:
        """
        标记参与者已提交过。

        Returns:
            首次标记时返回 True，之后的重复提交返回 False。
        """
        statement = (
            update(Participant)
            .where(
                Participant.decision_id == decision_id,  # type: ignore
                Participant.actor_key == actor_key,  # type: ignore
                Participant.has_voted == False,  # type: ignore  # noqa: E712
            )
            .values(has_voted=True)
            .returning(Participant.id)  # type: ignore
        )
        result = await self.session.exec(statement)  # type: ignore
        return result.scalar_one_or_none() is not None
