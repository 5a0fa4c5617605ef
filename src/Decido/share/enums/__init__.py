from .ActorKind import ActorKind
from .ConsensusVoteValue import ConsensusVoteValue
from .ConsentAmendmentAction import ConsentAmendmentAction
from .ConsentStage import ConsentStage
from .ConsentStepMode import ConsentStepMode
from .DecisionLogEventType import DecisionLogEventType
from .DecisionResult import DecisionResult
from .DecisionStatus import DecisionStatus
from .DecisionType import DecisionType
from .EntryKind import EntryKind
from .NuancedScale import NuancedScale
from .ObjectionStatus import ObjectionStatus
from .VotingMode import VotingMode

__all__ = [
    "ActorKind",
    "ConsensusVoteValue",
    "ConsentAmendmentAction",
    "ConsentStage",
    "ConsentStepMode",
    "DecisionLogEventType",
    "DecisionResult",
    "DecisionStatus",
    "DecisionType",
    "EntryKind",
    "NuancedScale",
    "ObjectionStatus",
    "VotingMode",
]
