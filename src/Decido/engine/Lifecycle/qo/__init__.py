from .AddProposalQo import AddProposalQo
from .CreateDecisionQo import CreateDecisionQo
from .LaunchDecisionQo import LaunchDecisionQo

__all__ = ["AddProposalQo", "CreateDecisionQo", "LaunchDecisionQo"]
