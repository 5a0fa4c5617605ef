import logging
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import delete, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from Decido.dto.ClarificationQuestionDto import ClarificationQuestionDto
from Decido.dto.ConsentStateDto import ConsentStateDto
from Decido.dto.DecisionDto import DecisionDto
from Decido.dto.LedgerEntryDtos import (
    BallotEntryDto,
    ConsensusEntryDto,
    MentionEntryDto,
    ObjectionEntryDto,
    OpinionEntryDto,
)
from Decido.dto.LedgerSnapshot import LedgerSnapshot
from Decido.dto.ParticipantDto import ParticipantDto
from Decido.dto.ProposalDto import ProposalDto
from Decido.models.BallotEntry import BallotEntry
from Decido.models.ClarificationQuestion import ClarificationQuestion
from Decido.models.ConsensusEntry import ConsensusEntry
from Decido.models.ConsentProposalState import ConsentProposalState
from Decido.models.MentionEntry import MentionEntry
from Decido.models.ObjectionEntry import ObjectionEntry
from Decido.models.OpinionEntry import OpinionEntry
from Decido.models.Participant import Participant
from Decido.models.Proposal import Proposal
from Decido.share.enums.ObjectionStatus import ObjectionStatus

logger = logging.getLogger(__name__)


class VoteLedgerService:
    """
    投票账本。
    每个 (参与者, 决策, 条目类型) 只保留一条有效记录，重复提交在同一事务内覆盖；
    澄清问题是唯一的只追加类型。
    调用方负责在写入前完成资格与阶段检查。
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    # --- 写入 ---

    async def upsert_ballot(
        self, decision_id: int, actor_key: str, proposal_id: int, now: datetime
    ) -> bool:
        """
        写入或覆盖选票。

        Returns:
            首次写入返回 True，覆盖返回 False。
        """
        entry = await self._get_one(BallotEntry, decision_id, actor_key)
        if entry is None:
            self.session.add(
                BallotEntry(
                    decision_id=decision_id,
                    actor_key=actor_key,
                    proposal_id=proposal_id,
                    updated_at=now,
                )
            )
            await self.session.flush()
            return True

        entry.proposal_id = proposal_id
        entry.updated_at = now
        await self.session.flush()
        return False

    async def upsert_consensus_vote(
        self,
        decision_id: int,
        actor_key: str,
        value: str,
        comment: Optional[str],
        now: datetime,
    ) -> bool:
        entry = await self._get_one(ConsensusEntry, decision_id, actor_key)
        if entry is None:
            self.session.add(
                ConsensusEntry(
                    decision_id=decision_id,
                    actor_key=actor_key,
                    value=value,
                    comment=comment,
                    updated_at=now,
                )
            )
            await self.session.flush()
            return True

        entry.value = value
        entry.comment = comment
        entry.updated_at = now
        await self.session.flush()
        return False

    async def replace_mention_set(
        self, decision_id: int, actor_key: str, mentions: Dict[int, str], now: datetime
    ) -> bool:
        """
        整体替换参与者的评语集，旧的评语全部删除后再写入新的。
        调用方需保证 mentions 覆盖了决策的全部提案。
        """
        existing = await self.session.exec(
            select(MentionEntry.id).where(
                MentionEntry.decision_id == decision_id, MentionEntry.actor_key == actor_key
            )
        )
        created = not existing.all()

        await self.session.exec(  # type: ignore
            delete(MentionEntry).where(
                MentionEntry.decision_id == decision_id,  # type: ignore
                MentionEntry.actor_key == actor_key,  # type: ignore
            )
        )
        for proposal_id, mention in mentions.items():
            self.session.add(
                MentionEntry(
                    decision_id=decision_id,
                    actor_key=actor_key,
                    proposal_id=proposal_id,
                    mention=mention,
                    updated_at=now,
                )
            )
        await self.session.flush()
        return created

    async def upsert_opinion(
        self, decision_id: int, actor_key: str, content: str, now: datetime
    ) -> bool:
        entry = await self._get_one(OpinionEntry, decision_id, actor_key)
        if entry is None:
            self.session.add(
                OpinionEntry(
                    decision_id=decision_id, actor_key=actor_key, content=content, updated_at=now
                )
            )
            await self.session.flush()
            return True

        entry.content = content
        entry.updated_at = now
        await self.session.flush()
        return False

    async def upsert_objection(
        self,
        decision_id: int,
        actor_key: str,
        status: ObjectionStatus,
        objection_text: Optional[str],
        now: datetime,
    ) -> bool:
        """
        写入或覆盖异议阶段的立场。
        第一次变为 OBJECTION 时记录 vetoed_at，之后无论立场如何变化都保留。
        """
        entry = await self._get_one(ObjectionEntry, decision_id, actor_key)
        vetoed_at = now if status == ObjectionStatus.OBJECTION else None
        if entry is None:
            self.session.add(
                ObjectionEntry(
                    decision_id=decision_id,
                    actor_key=actor_key,
                    status=status.value,
                    objection_text=objection_text,
                    vetoed_at=vetoed_at,
                    updated_at=now,
                )
            )
            await self.session.flush()
            return True

        entry.status = status.value
        entry.objection_text = objection_text
        if entry.vetoed_at is None:
            entry.vetoed_at = vetoed_at
        entry.updated_at = now
        await self.session.flush()
        return False

    async def add_question(
        self, decision_id: int, asker_key: str, question: str, now: datetime
    ) -> ClarificationQuestionDto:
        entry = ClarificationQuestion(
            decision_id=decision_id, asker_key=asker_key, question=question, created_at=now
        )
        self.session.add(entry)
        await self.session.flush()
        await self.session.refresh(entry)
        return ClarificationQuestionDto.model_validate(entry)

    async def get_question(
        self, decision_id: int, question_id: int
    ) -> Optional[ClarificationQuestionDto]:
        statement = select(ClarificationQuestion).where(
            ClarificationQuestion.id == question_id,
            ClarificationQuestion.decision_id == decision_id,
        )
        result = await self.session.exec(statement.execution_options(populate_existing=True))
        question = result.one_or_none()
        if not question:
            return None
        return ClarificationQuestionDto.model_validate(question)

    async def answer_question(
        self, question_id: int, answer: str, answerer_key: str, now: datetime
    ) -> bool:
        """
        一次性填写回答。只有回答仍为空时才会写入。
        """
        statement = (
            update(ClarificationQuestion)
            .where(
                ClarificationQuestion.id == question_id,  # type: ignore
                ClarificationQuestion.answer.is_(None),  # type: ignore
            )
            .values(answer=answer, answerer_key=answerer_key, answered_at=now)
            .returning(ClarificationQuestion.id)  # type: ignore
        )
        result = await self.session.exec(statement)  # type: ignore
        return result.scalar_one_or_none() is not None

    # --- 读取 ---

    async def snapshot(self, decision: DecisionDto) -> LedgerSnapshot:
        """
        读取决策当前的全部有效条目，组装成快照。
        """
        decision_id = decision.id

        proposals = await self._list(Proposal, decision_id, Proposal.display_order, Proposal.id)
        participants = await self.session.exec(
            select(Participant)
            .where(Participant.decision_id == decision_id, Participant.is_eligible == True)  # noqa: E712
            .order_by(Participant.id)  # type: ignore
            .execution_options(populate_existing=True)
        )
        ballots = await self._list(BallotEntry, decision_id, BallotEntry.id)
        consensus_votes = await self._list(ConsensusEntry, decision_id, ConsensusEntry.id)
        mentions = await self._list(MentionEntry, decision_id, MentionEntry.id)
        opinions = await self._list(OpinionEntry, decision_id, OpinionEntry.id)
        objections = await self._list(ObjectionEntry, decision_id, ObjectionEntry.id)
        questions = await self._list(ClarificationQuestion, decision_id, ClarificationQuestion.id)

        state_result = await self.session.exec(
            select(ConsentProposalState)
            .where(ConsentProposalState.decision_id == decision_id)
            .execution_options(populate_existing=True)
        )
        state = state_result.one_or_none()

        return LedgerSnapshot(
            decision=decision,
            proposals=[ProposalDto.model_validate(p) for p in proposals],
            participants=[ParticipantDto.model_validate(p) for p in participants.all()],
            ballots=[BallotEntryDto.model_validate(e) for e in ballots],
            consensus_votes=[ConsensusEntryDto.model_validate(e) for e in consensus_votes],
            mentions=[MentionEntryDto.model_validate(e) for e in mentions],
            opinions=[OpinionEntryDto.model_validate(e) for e in opinions],
            objections=[ObjectionEntryDto.model_validate(e) for e in objections],
            questions=[ClarificationQuestionDto.model_validate(e) for e in questions],
            consent_state=ConsentStateDto.model_validate(state) if state else None,
        )

    async def _get_one(self, model, decision_id: int, actor_key: str):
        statement = select(model).where(
            model.decision_id == decision_id, model.actor_key == actor_key
        )
        result = await self.session.exec(statement)
        return result.one_or_none()

    async def _list(self, model, decision_id: int, *order_by) -> List:
        statement = (
            select(model)
            .where(model.decision_id == decision_id)
            .order_by(*order_by)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(statement)
        return list(result.all())
