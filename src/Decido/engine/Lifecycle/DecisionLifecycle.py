import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence

from Decido.dto.ActorRef import ActorRef
from Decido.dto.ClarificationQuestionDto import ClarificationQuestionDto
from Decido.dto.ConsentStateDto import ConsentStateDto
from Decido.dto.DecisionDto import DecisionDto
from Decido.dto.DecisionLogDto import DecisionLogDto
from Decido.dto.LedgerSnapshot import LedgerSnapshot
from Decido.dto.ParticipantDto import ParticipantDto
from Decido.dto.ProposalDto import ProposalDto
from Decido.models.Decision import Decision
from Decido.share.AppConfig import AppConfig
from Decido.share.Clock import Clock, SystemClock
from Decido.share.DatabaseHandler import DatabaseHandler
from Decido.share.enums.ConsensusVoteValue import ConsensusVoteValue
from Decido.share.enums.ConsentAmendmentAction import ConsentAmendmentAction
from Decido.share.enums.ConsentStage import ConsentStage
from Decido.share.enums.ConsentStepMode import ConsentStepMode
from Decido.share.enums.DecisionLogEventType import DecisionLogEventType
from Decido.share.enums.DecisionResult import DecisionResult
from Decido.share.enums.DecisionStatus import DecisionStatus
from Decido.share.enums.DecisionType import DecisionType
from Decido.share.enums.EntryKind import EntryKind
from Decido.share.enums.NuancedScale import NuancedScale
from Decido.share.enums.ObjectionStatus import ObjectionStatus
from Decido.share.errors.AlreadyDecided import AlreadyDecided
from Decido.share.errors.DecisionNotFound import DecisionNotFound
from Decido.share.errors.IncompleteSubmission import IncompleteSubmission
from Decido.share.errors.InvalidConfiguration import InvalidConfiguration
from Decido.share.errors.NotEligible import NotEligible
from Decido.share.errors.StageClosed import StageClosed
from Decido.share.TimeUtils import TimeUtils
from Decido.share.UnitOfWork import UnitOfWork

from ..Consent.ConsentWorkflow import ConsentWorkflow
from ..Consent.dto.StageWindow import StageWindow
from ..Consent.StageClock import StageClock
from ..Consent.StagePermissions import StagePermissions
from ..Tabulation.dto.AdviceTally import AdviceTally
from ..Tabulation.dto.ConsensusTally import ConsensusTally
from ..Tabulation.dto.ConsentTally import ConsentTally
from ..Tabulation.dto.MajorityJudgmentTally import MajorityJudgmentTally
from ..Tabulation.dto.PluralityTally import PluralityTally
from ..Tabulation.dto.TabulationOutcome import TabulationOutcome
from ..Tabulation.dto.TallyDto import TallyDto
from ..Tabulation.StrategyRegistry import get_strategy
from .EligibilityService import EligibilityService
from .qo.AddProposalQo import AddProposalQo
from .qo.CreateDecisionQo import CreateDecisionQo
from .qo.LaunchDecisionQo import LaunchDecisionQo

logger = logging.getLogger(__name__)


class DecisionLifecycle:
    """
    决策生命周期 (DRAFT -> OPEN -> CLOSED) 的编排层。

    每个变更操作都在一个 UnitOfWork 中完成:
        1. 先递增决策的 lock_version，取得写锁，串行化同一决策上的所有写入；
        2. 检查状态、阶段与参与资格，写入投票账本；
        3. 在同一事务中重新评估是否应当结束决策，结束使用带条件的 UPDATE。
    任何拒绝都以 DecisionError 的子类抛出，事务随之回滚，账本不会被部分修改。
    唯一的例外是操作时发现决策已到截止时间: 先提交关闭，再抛出 StageClosed。

    所有操作都显式接收操作者身份 (ActorRef)，不依赖任何全局的“当前用户”。
    """

    def __init__(
        self,
        db_handler: DatabaseHandler,
        clock: Optional[Clock] = None,
        config: Optional[AppConfig] = None,
        stage_clock: Optional[StageClock] = None,
    ):
        self.db_handler = db_handler
        self.clock = clock or SystemClock()
        self.config = config or AppConfig()
        self.workflow = ConsentWorkflow(
            stage_clock or StageClock(self.config.consent_stage_weights)
        )

    # --- 草稿与启动 ---

    async def create_decision(self, creator: ActorRef, qo: CreateDecisionQo) -> DecisionDto:
        """
        创建一个草稿状态的决策。
        """
        if not qo.title or not qo.title.strip():
            raise InvalidConfiguration("决策标题不能为空。")
        if qo.nuanced_winner_count < 1:
            raise InvalidConfiguration("获胜数量至少为 1。")

        now = self.clock.now()
        decision = Decision(
            title=qo.title.strip(),
            description=qo.description,
            creator_key=creator.key,
            decision_type=qo.decision_type.value,
            voting_mode=qo.voting_mode.value,
            nuanced_winner_count=qo.nuanced_winner_count,
            created_at=now,
            updated_at=now,
        )
        if qo.decision_type == DecisionType.NUANCED_VOTE:
            decision.nuanced_scale = (qo.nuanced_scale or NuancedScale.FIVE_LEVELS).value
        if qo.decision_type == DecisionType.CONSENT:
            decision.consent_step_mode = (qo.consent_step_mode or ConsentStepMode.DISTINCT).value

        async with UnitOfWork(self.db_handler) as uow:
            decision = await uow.decision.create_decision(decision)
            assert decision.id is not None
            if qo.decision_type == DecisionType.CONSENT:
                await uow.consent.create_state(decision.id, (qo.initial_proposal or "").strip())
            await uow.decision_log.record(
                decision.id,
                DecisionLogEventType.CREATED,
                now,
                actor_key=creator.key,
                new_value=DecisionStatus.DRAFT.value,
                details={"decision_type": qo.decision_type.value, "title": decision.title},
            )
            result = DecisionDto.model_validate(decision)
            await uow.commit()

        logger.info(f"{creator.key} 创建了决策 {result.id} ({result.decision_type.value})")
        return result

    async def add_proposal(
        self, creator: ActorRef, decision_id: int, qo: AddProposalQo
    ) -> ProposalDto:
        """为草稿决策追加候选提案。决策开始后提案不可修改。"""
        now = self.clock.now()
        async with UnitOfWork(self.db_handler) as uow:
            decision = await self._lock(uow, decision_id, now)
            self._require_creator(decision, creator)
            if decision.decision_type not in (DecisionType.MAJORITY, DecisionType.NUANCED_VOTE):
                raise InvalidConfiguration(
                    f"{decision.decision_type.value} 类型的决策没有候选提案。"
                )
            if decision.status != DecisionStatus.DRAFT:
                raise StageClosed("决策开始后不能再修改提案。")
            if not qo.title or not qo.title.strip():
                raise InvalidConfiguration("提案标题不能为空。")

            proposal = await uow.proposal.add_proposal(
                decision_id, qo.title.strip(), qo.description
            )
            await uow.decision_log.record(
                decision_id,
                DecisionLogEventType.PROPOSAL_ADDED,
                now,
                actor_key=creator.key,
                new_value=proposal.title,
                details={"proposal_id": proposal.id},
            )
            await uow.commit()
            return proposal

    async def register_participants(
        self, decision_id: int, actors: Sequence[ActorRef], is_eligible: bool = True
    ) -> List[ParticipantDto]:
        """
        登记（或更新）决策的参与者名单。名单来自外部的成员管理方。
        决策进行中时，名单变化后会重新评估结果。
        """
        now = self.clock.now()
        async with UnitOfWork(self.db_handler) as uow:
            decision = await self._lock(uow, decision_id, now)
            if decision.status == DecisionStatus.CLOSED:
                raise StageClosed("决策已经结束，不能再修改参与者名单。")

            participants: List[ParticipantDto] = []
            for actor in actors:
                participant, created = await uow.participant.register(
                    decision_id, actor, is_eligible
                )
                participants.append(participant)
                if created:
                    await uow.decision_log.record(
                        decision_id,
                        DecisionLogEventType.PARTICIPANT_ADDED,
                        now,
                        actor_key=actor.key,
                        details={"actor_kind": actor.kind.value, "is_eligible": is_eligible},
                    )

            if decision.status == DecisionStatus.OPEN:
                await self._reevaluate(uow, decision, now)
            await uow.commit()
            return participants

    async def launch_decision(
        self, creator: ActorRef, decision_id: int, qo: Optional[LaunchDecisionQo] = None
    ) -> DecisionDto:
        """
        校验配置并启动决策 (DRAFT -> OPEN)。
        """
        qo = qo or LaunchDecisionQo()
        now = self.clock.now()
        async with UnitOfWork(self.db_handler) as uow:
            decision = await self._lock(uow, decision_id, now)
            self._require_creator(decision, creator)
            if decision.status != DecisionStatus.DRAFT:
                raise StageClosed("只有草稿状态的决策可以启动。")

            start = TimeUtils.to_naive_utc(qo.start_time) or now
            end = TimeUtils.to_naive_utc(qo.end_time)
            if end is None and qo.duration_hours is not None:
                end = TimeUtils.get_utc_end_time(
                    qo.duration_hours, qo.timezone or self.config.default_timezone, start
                )

            if end is not None and end <= start:
                raise InvalidConfiguration("截止时间必须晚于开始时间。")
            if end is None and decision.decision_type != DecisionType.ADVICE_SOLICITATION:
                raise InvalidConfiguration("该类型的决策必须设置截止时间。")

            consent_stage: Optional[ConsentStage] = None
            if decision.decision_type in (DecisionType.MAJORITY, DecisionType.NUANCED_VOTE):
                proposal_count = await uow.proposal.count_by_decision(decision_id)
                self._validate_proposals(decision, proposal_count)
            elif decision.decision_type == DecisionType.CONSENT:
                assert end is not None
                consent_stage = await self._validate_consent_launch(
                    uow, decision, qo, start, end, now
                )

            opened = await uow.decision.open_decision(
                decision_id, start, end, consent_stage.value if consent_stage else None
            )
            if not opened:
                raise StageClosed("决策已被启动。")

            await uow.decision_log.record(
                decision_id,
                DecisionLogEventType.LAUNCHED,
                now,
                actor_key=creator.key,
                old_value=DecisionStatus.DRAFT.value,
                new_value=DecisionStatus.OPEN.value,
                details={"start_time": start, "end_time": end},
            )
            result = await self._load(uow, decision_id)
            await uow.commit()

        logger.info(f"决策 {decision_id} 已启动，截止时间: {result.end_time}")
        return result

    @staticmethod
    def _validate_proposals(decision: DecisionDto, proposal_count: int):
        if proposal_count < 1:
            raise InvalidConfiguration("至少需要一个提案才能启动投票。")
        if decision.decision_type == DecisionType.NUANCED_VOTE:
            if decision.nuanced_scale is None:
                raise InvalidConfiguration("评价式投票必须设置评语等级。")
            if not 1 <= decision.nuanced_winner_count <= proposal_count:
                raise InvalidConfiguration(
                    f"获胜数量 ({decision.nuanced_winner_count}) 必须在 1 到提案数量 "
                    f"({proposal_count}) 之间。"
                )

    async def _validate_consent_launch(
        self,
        uow: UnitOfWork,
        decision: DecisionDto,
        qo: LaunchDecisionQo,
        start: datetime,
        end: datetime,
        now: datetime,
    ) -> Optional[ConsentStage]:
        """
        校验同意式决策的启动条件，返回启动时所处的阶段。
        """
        if decision.consent_step_mode is None:
            raise InvalidConfiguration("同意式决策必须设置阶段划分方式。")

        if qo.initial_proposal is not None and qo.initial_proposal.strip():
            await uow.consent.update_initial_proposal(decision.id, qo.initial_proposal.strip())
        state = await uow.consent.get_state(decision.id)
        if state is None or not state.initial_proposal.strip():
            raise InvalidConfiguration("同意式决策必须提供初始提案文本。")

        min_duration = timedelta(hours=self.config.consent_min_duration_hours)
        if end - start < min_duration:
            raise InvalidConfiguration(
                f"同意式决策的持续时间至少为 {self.config.consent_min_duration_hours} 小时。"
            )

        windows = self.workflow.stage_clock.compute_stages(
            start, end, decision.consent_step_mode
        )
        return StageClock.current_stage(now, windows)

    # --- 投票账本提交 ---

    async def submit_ballot(
        self, actor: ActorRef, decision_id: int, proposal_id: int
    ) -> PluralityTally:
        """多数投票: 投出或改投一票。"""
        now = self.clock.now()
        async with UnitOfWork(self.db_handler) as uow:
            decision = await self._lock(uow, decision_id, now)
            self._require_type(decision, DecisionType.MAJORITY)
            await self._ensure_open(uow, decision, now)
            await self._require_participant(uow, decision, actor, now)

            proposals = await uow.proposal.list_by_decision(decision_id)
            if proposal_id not in {p.id for p in proposals}:
                raise IncompleteSubmission(f"提案 {proposal_id} 不属于该决策。")

            created = await uow.ledger.upsert_ballot(decision_id, actor.key, proposal_id, now)
            await self._record_submission(
                uow,
                decision,
                actor,
                created,
                DecisionLogEventType.VOTE_RECORDED,
                DecisionLogEventType.VOTE_UPDATED,
                now,
                {"proposal_id": proposal_id},
            )
            return await self._finish_submission(uow, decision, actor, now)  # type: ignore

    async def submit_consensus_vote(
        self,
        actor: ActorRef,
        decision_id: int,
        value: ConsensusVoteValue,
        comment: Optional[str] = None,
    ) -> ConsensusTally:
        """一致同意: 表态同意或不同意，可覆盖。"""
        now = self.clock.now()
        try:
            value = ConsensusVoteValue(value)
        except ValueError:
            raise IncompleteSubmission(f"无效的表态: {value}")

        async with UnitOfWork(self.db_handler) as uow:
            decision = await self._lock(uow, decision_id, now)
            self._require_type(decision, DecisionType.CONSENSUS)
            await self._ensure_open(uow, decision, now)
            await self._require_participant(uow, decision, actor, now)

            created = await uow.ledger.upsert_consensus_vote(
                decision_id, actor.key, value.value, comment, now
            )
            await self._record_submission(
                uow,
                decision,
                actor,
                created,
                DecisionLogEventType.VOTE_RECORDED,
                DecisionLogEventType.VOTE_UPDATED,
                now,
                {"value": value.value},
            )
            return await self._finish_submission(uow, decision, actor, now)  # type: ignore

    async def submit_mention_set(
        self, actor: ActorRef, decision_id: int, mentions: Dict[int, str]
    ) -> MajorityJudgmentTally:
        """
        评价式投票: 对全部提案各给出一个评语。
        缺少任何一个提案的评语或评语不属于决策的评语等级时整体拒绝。
        """
        now = self.clock.now()
        async with UnitOfWork(self.db_handler) as uow:
            decision = await self._lock(uow, decision_id, now)
            self._require_type(decision, DecisionType.NUANCED_VOTE)
            await self._ensure_open(uow, decision, now)
            await self._require_participant(uow, decision, actor, now)

            proposals = await uow.proposal.list_by_decision(decision_id)
            normalized = self._validate_mention_set(decision, proposals, mentions)

            created = await uow.ledger.replace_mention_set(
                decision_id, actor.key, normalized, now
            )
            await self._record_submission(
                uow,
                decision,
                actor,
                created,
                DecisionLogEventType.VOTE_RECORDED,
                DecisionLogEventType.VOTE_UPDATED,
                now,
                {"mentions": {str(k): v for k, v in normalized.items()}},
            )
            return await self._finish_submission(uow, decision, actor, now)  # type: ignore

    @staticmethod
    def _validate_mention_set(
        decision: DecisionDto, proposals: List[ProposalDto], mentions: Dict[int, str]
    ) -> Dict[int, str]:
        scale = decision.nuanced_scale or NuancedScale.FIVE_LEVELS
        proposal_ids = {p.id for p in proposals}

        unknown = set(mentions) - proposal_ids
        if unknown:
            raise IncompleteSubmission(f"评语中包含不属于该决策的提案: {sorted(unknown)}")
        missing = [p.id for p in proposals if p.id not in mentions]
        if missing:
            raise IncompleteSubmission(f"缺少提案 {missing} 的评语，评语集必须覆盖全部提案。")

        normalized: Dict[int, str] = {}
        for proposal_id, mention in mentions.items():
            value = getattr(mention, "value", mention)
            if value not in scale.mentions:
                raise IncompleteSubmission(f"评语 {value} 不属于 {scale.value} 等级。")
            normalized[proposal_id] = value
        return normalized

    async def submit_opinion(self, actor: ActorRef, decision_id: int, content: str) -> TallyDto:
        """
        提交或覆盖意见。
        征求意见中发起人不能提交意见；同意式决策中只在意见相关阶段接受。
        """
        now = self.clock.now()
        async with UnitOfWork(self.db_handler) as uow:
            decision = await self._lock(uow, decision_id, now)
            self._require_type(decision, DecisionType.ADVICE_SOLICITATION, DecisionType.CONSENT)
            await self._ensure_open(uow, decision, now)

            if decision.decision_type == DecisionType.CONSENT:
                stage = await self._sync_consent(uow, decision, now)
                StagePermissions.ensure_allowed(stage, EntryKind.OPINION)
            elif EligibilityService.is_creator(decision, actor):
                raise NotEligible("发起人不能对自己征求的意见提交意见。")

            await self._require_participant(uow, decision, actor, now)
            if not content or not content.strip():
                raise IncompleteSubmission("意见内容不能为空。")

            created = await uow.ledger.upsert_opinion(
                decision_id, actor.key, content.strip(), now
            )
            await self._record_submission(
                uow,
                decision,
                actor,
                created,
                DecisionLogEventType.OPINION_SUBMITTED,
                DecisionLogEventType.OPINION_UPDATED,
                now,
            )
            return await self._finish_submission(uow, decision, actor, now)

    async def submit_objection(
        self,
        actor: ActorRef,
        decision_id: int,
        status: ObjectionStatus,
        objection_text: Optional[str] = None,
    ) -> ConsentTally:
        """
        同意式决策: 在异议阶段表明立场。
        一条 OBJECTION 立即使决策以 BLOCKED 结束。
        """
        now = self.clock.now()
        try:
            status = ObjectionStatus(status)
        except ValueError:
            raise IncompleteSubmission(f"无效的立场: {status}")

        async with UnitOfWork(self.db_handler) as uow:
            decision = await self._lock(uow, decision_id, now)
            self._require_type(decision, DecisionType.CONSENT)
            await self._ensure_open(uow, decision, now)
            stage = await self._sync_consent(uow, decision, now)
            StagePermissions.ensure_allowed(stage, EntryKind.OBJECTION)
            await self._require_participant(uow, decision, actor, now)

            text = objection_text.strip() if objection_text else None
            if status == ObjectionStatus.OBJECTION and not text:
                raise IncompleteSubmission("提出异议时必须说明理由。")
            if status != ObjectionStatus.OBJECTION:
                text = None

            created = await uow.ledger.upsert_objection(
                decision_id, actor.key, status, text, now
            )
            await self._record_submission(
                uow,
                decision,
                actor,
                created,
                DecisionLogEventType.CONSENT_POSITION_RECORDED,
                DecisionLogEventType.CONSENT_POSITION_UPDATED,
                now,
                {"status": status.value},
            )
            return await self._finish_submission(uow, decision, actor, now)  # type: ignore

    # --- 澄清问题 ---

    async def ask_clarification(
        self, actor: ActorRef, decision_id: int, question: str
    ) -> ClarificationQuestionDto:
        now = self.clock.now()
        async with UnitOfWork(self.db_handler) as uow:
            decision = await self._lock(uow, decision_id, now)
            self._require_type(decision, DecisionType.CONSENT)
            await self._ensure_open(uow, decision, now)
            stage = await self._sync_consent(uow, decision, now)
            StagePermissions.ensure_allowed(stage, EntryKind.CLARIFICATION_QUESTION)
            await self._require_participant(uow, decision, actor, now)
            if not question or not question.strip():
                raise IncompleteSubmission("问题内容不能为空。")

            entry = await uow.ledger.add_question(decision_id, actor.key, question.strip(), now)
            await uow.participant.mark_has_voted(decision_id, actor.key)
            await uow.decision_log.record(
                decision_id,
                DecisionLogEventType.CONSENT_QUESTION_POSTED,
                now,
                actor_key=actor.key,
                details={"question_id": entry.id},
            )
            await uow.commit()
            return entry

    async def answer_clarification(
        self, creator: ActorRef, decision_id: int, question_id: int, answer: str
    ) -> ClarificationQuestionDto:
        """回答澄清问题。只有发起人可以回答，且每个问题只能回答一次。"""
        now = self.clock.now()
        async with UnitOfWork(self.db_handler) as uow:
            decision = await self._lock(uow, decision_id, now)
            self._require_type(decision, DecisionType.CONSENT)
            self._require_creator(decision, creator)
            await self._ensure_open(uow, decision, now)
            stage = await self._sync_consent(uow, decision, now)
            StagePermissions.ensure_allowed(stage, EntryKind.CLARIFICATION_ANSWER)
            if not answer or not answer.strip():
                raise IncompleteSubmission("回答内容不能为空。")

            question = await uow.ledger.get_question(decision_id, question_id)
            if question is None:
                raise IncompleteSubmission(f"问题 {question_id} 不属于该决策。")
            if not await uow.ledger.answer_question(question_id, answer.strip(), creator.key, now):
                raise AlreadyDecided("该问题已经回答过了。")

            await uow.decision_log.record(
                decision_id,
                DecisionLogEventType.CONSENT_QUESTION_ANSWERED,
                now,
                actor_key=creator.key,
                details={"question_id": question_id},
            )
            answered = await uow.ledger.get_question(decision_id, question_id)
            await uow.commit()
            assert answered is not None
            return answered

    # --- 发起人对提案的一次性决定 ---

    async def amend_proposal(
        self, creator: ActorRef, decision_id: int, new_text: str
    ) -> ConsentStateDto:
        return await self._consent_action(
            creator, decision_id, ConsentAmendmentAction.AMENDED, new_text
        )

    async def keep_proposal(self, creator: ActorRef, decision_id: int) -> ConsentStateDto:
        return await self._consent_action(creator, decision_id, ConsentAmendmentAction.KEPT)

    async def withdraw_proposal(self, creator: ActorRef, decision_id: int) -> ConsentStateDto:
        return await self._consent_action(creator, decision_id, ConsentAmendmentAction.WITHDRAWN)

    async def _consent_action(
        self,
        creator: ActorRef,
        decision_id: int,
        action: ConsentAmendmentAction,
        new_text: Optional[str] = None,
    ) -> ConsentStateDto:
        now = self.clock.now()
        async with UnitOfWork(self.db_handler) as uow:
            decision = await self._lock(uow, decision_id, now)
            self._require_type(decision, DecisionType.CONSENT)
            self._require_creator(decision, creator)
            await self._apply_consent_action(uow, decision, creator, action, new_text, now)

            decision = await self._load(uow, decision_id)
            state = await uow.consent.get_state(decision_id)
            assert state is not None
            state.stage = self.workflow.resolve(decision, state, now).stage
            await uow.commit()
            return state

    async def _apply_consent_action(
        self,
        uow: UnitOfWork,
        decision: DecisionDto,
        creator: ActorRef,
        action: ConsentAmendmentAction,
        new_text: Optional[str],
        now: datetime,
    ):
        await self._ensure_open(uow, decision, now)
        stage = await self._sync_consent(uow, decision, now)

        state = await uow.consent.get_state(decision.id)
        if state is None:
            raise InvalidConfiguration("同意式决策缺少提案状态。")
        if state.amendment_action is not None:
            raise AlreadyDecided(
                f"发起人已经对提案作出决定 ({state.amendment_action.value})，不能再次修改。"
            )
        StagePermissions.ensure_allowed(stage, EntryKind.PROPOSAL_STATE)

        text = new_text.strip() if new_text else None
        if action == ConsentAmendmentAction.AMENDED and not text:
            raise IncompleteSubmission("修订后的提案文本不能为空。")

        if not await uow.consent.record_action(decision.id, action, now, amended_text=text):
            raise AlreadyDecided("发起人已经对提案作出决定，不能再次修改。")

        event = {
            ConsentAmendmentAction.AMENDED: DecisionLogEventType.CONSENT_PROPOSAL_AMENDED,
            ConsentAmendmentAction.KEPT: DecisionLogEventType.CONSENT_PROPOSAL_KEPT,
            ConsentAmendmentAction.WITHDRAWN: DecisionLogEventType.CONSENT_PROPOSAL_WITHDRAWN,
        }[action]
        await uow.decision_log.record(
            decision.id,
            event,
            now,
            actor_key=creator.key,
            old_value=state.current_proposal if action == ConsentAmendmentAction.AMENDED else None,
            new_value=text if action == ConsentAmendmentAction.AMENDED else action.value,
            details={"implicit": False},
        )
        logger.info(f"决策 {decision.id} 的发起人作出决定: {action.value}")

        await self._sync_consent(uow, decision, now)
        await self._reevaluate(uow, decision, now, creator.key)

    # --- 结束决策 ---

    async def validate_advice(
        self, creator: ActorRef, decision_id: int, conclusion: str
    ) -> DecisionDto:
        """
        征求意见: 全部意见收齐后，发起人写下结论并确认，决策以 APPROVED 结束。
        """
        now = self.clock.now()
        async with UnitOfWork(self.db_handler) as uow:
            decision = await self._lock(uow, decision_id, now)
            self._require_type(decision, DecisionType.ADVICE_SOLICITATION)
            self._require_creator(decision, creator)
            if decision.status == DecisionStatus.CLOSED and decision.conclusion:
                raise AlreadyDecided("该征求意见已经有了最终结论。")
            await self._ensure_open(uow, decision, now)
            if not conclusion or not conclusion.strip():
                raise IncompleteSubmission("结论不能为空。")

            snapshot = await uow.ledger.snapshot(decision)
            tally = get_strategy(decision.decision_type).tally(snapshot)
            assert isinstance(tally, AdviceTally)
            if not tally.all_received:
                raise IncompleteSubmission(
                    f"尚未收齐全部意见 ({tally.received_count}/{tally.total_solicited})。"
                )

            outcome = TabulationOutcome(result=DecisionResult.APPROVED, reason="发起人确认了结论")
            await self._close(uow, decision, outcome, now, creator.key, conclusion.strip())
            result = await self._load(uow, decision_id)
            await uow.commit()
            return result

    async def withdraw_decision(self, creator: ActorRef, decision_id: int) -> DecisionDto:
        """
        发起人撤回决策，决策以 WITHDRAWN 结束。
        同意式决策只能在修订阶段撤回，与 withdraw_proposal 相同。
        """
        now = self.clock.now()
        async with UnitOfWork(self.db_handler) as uow:
            decision = await self._lock(uow, decision_id, now)
            self._require_creator(decision, creator)
            if decision.status == DecisionStatus.CLOSED:
                raise AlreadyDecided("决策已经结束。")

            if decision.decision_type == DecisionType.CONSENT:
                await self._apply_consent_action(
                    uow, decision, creator, ConsentAmendmentAction.WITHDRAWN, None, now
                )
            else:
                await self._ensure_open(uow, decision, now)
                outcome = TabulationOutcome(
                    result=DecisionResult.WITHDRAWN, reason="发起人撤回了决策"
                )
                await self._close(uow, decision, outcome, now, creator.key)

            result = await self._load(uow, decision_id)
            await uow.commit()
            return result

    async def sweep_decision(
        self, decision_id: int, now: Optional[datetime] = None
    ) -> Optional[DecisionResult]:
        """
        由后台扫描调用: 同步同意式决策的阶段，并在到期时结束决策。
        与参与者的操作使用同一把写锁和同一个条件关闭。

        Returns:
            本次扫描结束了决策时返回结果，否则返回 None。
        """
        now = TimeUtils.to_naive_utc(now) or self.clock.now()
        async with UnitOfWork(self.db_handler) as uow:
            decision = await self._lock(uow, decision_id, now)
            if decision.status != DecisionStatus.OPEN:
                return None
            if decision.decision_type == DecisionType.CONSENT:
                await self._sync_consent(uow, decision, now)
            result = await self._reevaluate(uow, decision, now)
            await uow.commit()
            return result

    async def list_sweep_candidates(self, now: Optional[datetime] = None) -> List[int]:
        now = TimeUtils.to_naive_utc(now) or self.clock.now()
        async with UnitOfWork(self.db_handler) as uow:
            return await uow.decision.get_sweep_candidate_ids(now)

    # --- 只读查询 ---

    async def get_decision(self, decision_id: int) -> DecisionDto:
        async with UnitOfWork(self.db_handler) as uow:
            return await self._load(uow, decision_id)

    async def current_stage(
        self, decision_id: int, now: Optional[datetime] = None
    ) -> Optional[ConsentStage]:
        """同意式决策在 now 时刻的有效阶段；其他类型的决策返回 None。"""
        now = TimeUtils.to_naive_utc(now) or self.clock.now()
        async with UnitOfWork(self.db_handler) as uow:
            decision = await self._load(uow, decision_id)
            if decision.decision_type != DecisionType.CONSENT:
                return None
            state = await uow.consent.get_state(decision_id)
            return self.workflow.resolve(decision, state, now).stage

    async def compute_result(
        self, decision_id: int, now: Optional[datetime] = None
    ) -> TabulationOutcome:
        """
        计算决策在 now 时刻的结论，不做任何写入，可以重复调用。
        是否把结论持久化为 CLOSED 由调用方（或后台扫描）决定。
        """
        now = TimeUtils.to_naive_utc(now) or self.clock.now()
        async with UnitOfWork(self.db_handler) as uow:
            decision = await self._load(uow, decision_id)
            if decision.status == DecisionStatus.CLOSED:
                return TabulationOutcome(result=decision.result, reason="决策已经结束")
            if decision.status == DecisionStatus.DRAFT:
                return TabulationOutcome(result=None, reason="决策尚未开始")

            snapshot = await uow.ledger.snapshot(decision)
            return self._evaluate(decision, snapshot, now)

    async def get_tally(self, decision_id: int, now: Optional[datetime] = None) -> TallyDto:
        now = TimeUtils.to_naive_utc(now) or self.clock.now()
        async with UnitOfWork(self.db_handler) as uow:
            return await self._tally(uow, decision_id, now)

    async def get_stage_windows(self, decision_id: int) -> List[StageWindow]:
        async with UnitOfWork(self.db_handler) as uow:
            decision = await self._load(uow, decision_id)
            if decision.decision_type != DecisionType.CONSENT:
                return []
            return self.workflow.windows(decision)

    async def get_consent_state(
        self, decision_id: int, now: Optional[datetime] = None
    ) -> Optional[ConsentStateDto]:
        now = TimeUtils.to_naive_utc(now) or self.clock.now()
        async with UnitOfWork(self.db_handler) as uow:
            decision = await self._load(uow, decision_id)
            state = await uow.consent.get_state(decision_id)
            if state is not None:
                state.stage = self.workflow.resolve(decision, state, now).stage
            return state

    async def get_participants(self, decision_id: int) -> List[ParticipantDto]:
        """
        有效参与者名单。has_voted 按账本重新推导，participant 表上的标记仅作缓存。
        """
        async with UnitOfWork(self.db_handler) as uow:
            decision = await self._load(uow, decision_id)
            acted = (await uow.ledger.snapshot(decision)).acted_keys
            participants = await uow.participant.list_eligible(decision_id)
            for participant in participants:
                participant.has_voted = participant.actor_key in acted
            return participants

    async def get_history(self, decision_id: int) -> List[DecisionLogDto]:
        async with UnitOfWork(self.db_handler) as uow:
            await self._load(uow, decision_id)
            return await uow.decision_log.list_by_decision(decision_id)

    # --- 内部辅助 ---

    async def _lock(self, uow: UnitOfWork, decision_id: int, now: datetime) -> DecisionDto:
        if not await uow.decision.lock_for_update(decision_id, now):
            raise DecisionNotFound(decision_id)
        return await self._load(uow, decision_id)

    @staticmethod
    async def _load(uow: UnitOfWork, decision_id: int) -> DecisionDto:
        decision = await uow.decision.get_by_id(decision_id)
        if decision is None:
            raise DecisionNotFound(decision_id)
        return DecisionDto.model_validate(decision)

    @staticmethod
    def _require_type(decision: DecisionDto, *decision_types: DecisionType):
        if decision.decision_type not in decision_types:
            raise StageClosed(f"{decision.decision_type.value} 类型的决策不接受此操作。")

    @staticmethod
    def _require_creator(decision: DecisionDto, actor: ActorRef):
        if not EligibilityService.is_creator(decision, actor):
            raise NotEligible("只有决策发起人可以执行此操作。")

    @staticmethod
    def _deadline_passed(decision: DecisionDto, now: datetime) -> bool:
        return (
            decision.decision_type != DecisionType.ADVICE_SOLICITATION
            and decision.end_time is not None
            and now >= decision.end_time
        )

    async def _ensure_open(self, uow: UnitOfWork, decision: DecisionDto, now: datetime):
        """
        Raises:
            StageClosed: 决策未开始、已结束，或刚刚因截止时间被结束。
        """
        if decision.status == DecisionStatus.DRAFT:
            raise StageClosed("决策尚未开始。")
        if decision.status == DecisionStatus.CLOSED:
            raise StageClosed("决策已经结束。")
        if decision.start_time is not None and now < decision.start_time:
            raise StageClosed("决策尚未到开始时间。")
        if self._deadline_passed(decision, now):
            await self._reevaluate(uow, decision, now)
            await uow.commit()
            raise StageClosed("决策已到截止时间，已自动结束。")

    async def _require_participant(
        self, uow: UnitOfWork, decision: DecisionDto, actor: ActorRef, now: datetime
    ) -> ParticipantDto:
        participant = await uow.participant.get_participant(decision.id, actor.key)
        if participant is None and EligibilityService.can_self_register(decision, actor):
            participant, _ = await uow.participant.register(decision.id, actor)
            await uow.decision_log.record(
                decision.id,
                DecisionLogEventType.PARTICIPANT_ADDED,
                now,
                actor_key=actor.key,
                details={"actor_kind": actor.kind.value, "self_registered": True},
            )
            logger.info(f"公开决策 {decision.id} 自动登记了外部参与者 {actor.key}")

        if not EligibilityService.is_eligible(participant):
            raise NotEligible()
        assert participant is not None
        return participant

    async def _record_submission(
        self,
        uow: UnitOfWork,
        decision: DecisionDto,
        actor: ActorRef,
        created: bool,
        recorded: DecisionLogEventType,
        updated: DecisionLogEventType,
        now: datetime,
        details: Optional[Dict[str, Any]] = None,
    ):
        await uow.participant.mark_has_voted(decision.id, actor.key)
        await uow.decision_log.record(
            decision.id,
            recorded if created else updated,
            now,
            actor_key=actor.key,
            # 匿名决策的历史中不保存提交内容
            details=None if decision.is_anonymous else details,
        )

    async def _finish_submission(
        self, uow: UnitOfWork, decision: DecisionDto, actor: ActorRef, now: datetime
    ) -> TallyDto:
        await self._reevaluate(uow, decision, now, actor.key)
        tally = await self._tally(uow, decision.id, now)
        await uow.commit()
        return tally

    async def _sync_consent(
        self, uow: UnitOfWork, decision: DecisionDto, now: datetime
    ) -> Optional[ConsentStage]:
        """
        计算同意式决策的有效阶段，并持久化由时钟推动的变化:
        修订阶段到期时默认保持原提案，以及缓存的当前阶段。
        """
        state = await uow.consent.get_state(decision.id)
        resolution = self.workflow.resolve(decision, state, now)

        if resolution.implicit_keep:
            applied = await uow.consent.record_action(
                decision.id, ConsentAmendmentAction.KEPT, now, implicit=True
            )
            if applied:
                logger.info(f"决策 {decision.id} 的修订阶段已结束且发起人未作决定，默认保持原提案。")
                await uow.decision_log.record(
                    decision.id,
                    DecisionLogEventType.CONSENT_PROPOSAL_KEPT,
                    now,
                    new_value=ConsentAmendmentAction.KEPT.value,
                    details={"implicit": True},
                )

        stage = resolution.stage
        if (
            stage is not None
            and stage != ConsentStage.TERMINEE
            and stage != decision.consent_current_stage
        ):
            old_stage = decision.consent_current_stage
            await uow.decision.set_consent_stage(decision.id, stage.value)
            await uow.decision_log.record(
                decision.id,
                DecisionLogEventType.CONSENT_STAGE_CHANGED,
                now,
                old_value=old_stage.value if old_stage else None,
                new_value=stage.value,
            )
            decision.consent_current_stage = stage
        return stage

    def _evaluate(
        self, decision: DecisionDto, snapshot: LedgerSnapshot, now: datetime
    ) -> TabulationOutcome:
        strategy = get_strategy(decision.decision_type)
        stage = None
        if decision.decision_type == DecisionType.CONSENT:
            stage = self.workflow.resolve(decision, snapshot.consent_state, now).stage

        outcome = strategy.evaluate(snapshot, stage)
        if outcome.result is None and self._deadline_passed(decision, now):
            outcome = strategy.deadline_outcome(snapshot)
        return outcome

    async def _reevaluate(
        self,
        uow: UnitOfWork,
        decision: DecisionDto,
        now: datetime,
        actor_key: Optional[str] = None,
    ) -> Optional[DecisionResult]:
        """
        在当前事务中重新评估决策，需要结束时执行条件关闭。
        """
        if decision.status != DecisionStatus.OPEN:
            return None
        snapshot = await uow.ledger.snapshot(decision)
        outcome = self._evaluate(decision, snapshot, now)
        if not outcome.is_terminal:
            return None
        return await self._close(uow, decision, outcome, now, actor_key)

    async def _close(
        self,
        uow: UnitOfWork,
        decision: DecisionDto,
        outcome: TabulationOutcome,
        now: datetime,
        actor_key: Optional[str] = None,
        conclusion: Optional[str] = None,
    ) -> Optional[DecisionResult]:
        assert outcome.result is not None
        consent_stage = (
            ConsentStage.TERMINEE.value
            if decision.decision_type == DecisionType.CONSENT
            else None
        )
        closed = await uow.decision.close_decision(
            decision.id, outcome.result, now, conclusion, consent_stage
        )
        if not closed:
            logger.debug(f"决策 {decision.id} 已被其他操作结束，跳过。")
            return None

        by_deadline = self._deadline_passed(decision, now)
        if by_deadline:
            logger.info(
                f"决策 {decision.id} 已到截止时间，自动结束，结果: {outcome.result.value}"
                f"（{outcome.reason}）"
            )
        else:
            logger.info(
                f"决策 {decision.id} 已结束，结果: {outcome.result.value}（{outcome.reason}）"
            )

        await uow.decision_log.record(
            decision.id,
            DecisionLogEventType.FINAL_DECISION_MADE,
            now,
            actor_key=actor_key,
            new_value=outcome.result.value,
            details={"reason": outcome.reason, "by_deadline": by_deadline},
        )
        await uow.decision_log.record(
            decision.id,
            DecisionLogEventType.CLOSED,
            now,
            actor_key=actor_key,
            old_value=DecisionStatus.OPEN.value,
            new_value=DecisionStatus.CLOSED.value,
        )
        decision.status = DecisionStatus.CLOSED
        decision.result = outcome.result
        decision.decided_at = now
        return outcome.result

    async def _tally(self, uow: UnitOfWork, decision_id: int, now: datetime) -> TallyDto:
        decision = await self._load(uow, decision_id)
        snapshot = await uow.ledger.snapshot(decision)
        stage = None
        if decision.decision_type == DecisionType.CONSENT:
            stage = self.workflow.resolve(decision, snapshot.consent_state, now).stage
        return get_strategy(decision.decision_type).tally(snapshot, stage)
