from datetime import datetime
from typing import Optional

from Decido.share.BaseDto import BaseDto
from Decido.share.enums.ConsensusVoteValue import ConsensusVoteValue
from Decido.share.enums.ObjectionStatus import ObjectionStatus


class BallotEntryDto(BaseDto):
    """多数投票的一张有效选票"""

    actor_key: str
    proposal_id: int
    updated_at: Optional[datetime] = None


class ConsensusEntryDto(BaseDto):
    """一致同意投票的一条记录"""

    actor_key: str
    value: ConsensusVoteValue
    comment: Optional[str] = None
    updated_at: Optional[datetime] = None


class MentionEntryDto(BaseDto):
    """评价式投票中对单个提案的评语"""

    actor_key: str
    proposal_id: int
    mention: str


class OpinionEntryDto(BaseDto):
    actor_key: str
    content: str
    updated_at: Optional[datetime] = None


class ObjectionEntryDto(BaseDto):
    """
    异议阶段的立场。
    vetoed_at 不为空表示该参与者曾经提出过异议，即使之后改变了立场。
    """

    actor_key: str
    status: ObjectionStatus
    objection_text: Optional[str] = None
    vetoed_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
