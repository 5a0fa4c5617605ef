from .BallotEntry import BallotEntry
from .BaseModel import BaseModel
from .ClarificationQuestion import ClarificationQuestion
from .ConsensusEntry import ConsensusEntry
from .ConsentProposalState import ConsentProposalState
from .Decision import Decision
from .DecisionLog import DecisionLog
from .MentionEntry import MentionEntry
from .ObjectionEntry import ObjectionEntry
from .OpinionEntry import OpinionEntry
from .Participant import Participant
from .Proposal import Proposal

__all__ = [
    "BallotEntry",
    "BaseModel",
    "ClarificationQuestion",
    "ConsensusEntry",
    "ConsentProposalState",
    "Decision",
    "DecisionLog",
    "MentionEntry",
    "ObjectionEntry",
    "OpinionEntry",
    "Participant",
    "Proposal",
]
