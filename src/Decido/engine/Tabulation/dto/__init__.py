from .AdviceTally import AdviceTally
from .ConsensusTally import ConsensusTally
from .ConsentTally import ConsentTally
from .MajorityJudgmentTally import MajorityJudgmentTally, ProposalJudgment
from .PluralityTally import PluralityTally, ProposalCount
from .TabulationOutcome import TabulationOutcome
from .TallyDto import TallyDto

__all__ = [
    "AdviceTally",
    "ConsensusTally",
    "ConsentTally",
    "MajorityJudgmentTally",
    "PluralityTally",
    "ProposalCount",
    "ProposalJudgment",
    "TabulationOutcome",
    "TallyDto",
]
