from .ActorRef import ActorRef
from .ClarificationQuestionDto import ClarificationQuestionDto
from .ConsentStateDto import ConsentStateDto
from .DecisionDto import DecisionDto
from .DecisionLogDto import DecisionLogDto
from .LedgerEntryDtos import (
    BallotEntryDto,
    ConsensusEntryDto,
    MentionEntryDto,
    ObjectionEntryDto,
    OpinionEntryDto,
)
from .LedgerSnapshot import LedgerSnapshot
from .ParticipantDto import ParticipantDto
from .ProposalDto import ProposalDto

__all__ = [
    "ActorRef",
    "BallotEntryDto",
    "ClarificationQuestionDto",
    "ConsensusEntryDto",
    "ConsentStateDto",
    "DecisionDto",
    "DecisionLogDto",
    "LedgerSnapshot",
    "MentionEntryDto",
    "ObjectionEntryDto",
    "OpinionEntryDto",
    "ParticipantDto",
    "ProposalDto",
]
