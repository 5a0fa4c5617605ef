from .DecisionLifecycle import DecisionLifecycle
from .EligibilityService import EligibilityService
from .qo import AddProposalQo, CreateDecisionQo, LaunchDecisionQo
from .tasks import DecisionSweeper

__all__ = [
    "AddProposalQo",
    "CreateDecisionQo",
    "DecisionLifecycle",
    "DecisionSweeper",
    "EligibilityService",
    "LaunchDecisionQo",
]
