from typing import Dict, List, Optional, Set

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
from Decido.dto.ParticipantDto import ParticipantDto
from Decido.dto.ProposalDto import ProposalDto
from Decido.share.BaseDto import BaseDto


class LedgerSnapshot(BaseDto):
    """
    某一时刻投票账本的完整只读快照。
    所有计票算法都只从快照重新推导结果，不依赖参与者记录上的 has_voted 标记。
    """

    decision: DecisionDto
    proposals: List[ProposalDto] = []
    participants: List[ParticipantDto] = []
    ballots: List[BallotEntryDto] = []
    consensus_votes: List[ConsensusEntryDto] = []
    mentions: List[MentionEntryDto] = []
    opinions: List[OpinionEntryDto] = []
    objections: List[ObjectionEntryDto] = []
    questions: List[ClarificationQuestionDto] = []
    consent_state: Optional[ConsentStateDto] = None

    @property
    def eligible_keys(self) -> Set[str]:
        return {p.actor_key for p in self.participants if p.is_eligible}

    @property
    def eligible_ballots(self) -> List[BallotEntryDto]:
        """失去资格的参与者留下的选票不再计入。"""
        eligible = self.eligible_keys
        return [b for b in self.ballots if b.actor_key in eligible]

    def mention_sets(self) -> Dict[str, Dict[int, str]]:
        """按有效参与者分组的评语集: actor_key -> {proposal_id: mention}"""
        eligible = self.eligible_keys
        grouped: Dict[str, Dict[int, str]] = {}
        for entry in self.mentions:
            if entry.actor_key not in eligible:
                continue
            grouped.setdefault(entry.actor_key, {})[entry.proposal_id] = entry.mention
        return grouped

    def visible_voters(self, actor_keys: List[str]) -> Optional[List[str]]:
        """匿名决策不公开参与者名单。"""
        if self.decision.is_anonymous:
            return None
        return sorted(set(actor_keys))

    @property
    def acted_keys(self) -> Set[str]:
        """在账本中留有任何条目的参与者，是“已提交过”的权威来源。"""
        entries = [
            *self.ballots,
            *self.consensus_votes,
            *self.mentions,
            *self.opinions,
            *self.objections,
        ]
        keys = {entry.actor_key for entry in entries}
        keys.update(q.asker_key for q in self.questions)
        return keys
