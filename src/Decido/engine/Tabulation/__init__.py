from .AdviceStrategy import AdviceStrategy
from .ConsensusStrategy import ConsensusStrategy
from .ConsentStrategy import ConsentStrategy
from .MajorityJudgmentStrategy import MajorityJudgmentStrategy
from .PluralityStrategy import PluralityStrategy
from .StrategyRegistry import get_strategy
from .TabulationStrategy import TabulationStrategy

__all__ = [
    "AdviceStrategy",
    "ConsensusStrategy",
    "ConsentStrategy",
    "MajorityJudgmentStrategy",
    "PluralityStrategy",
    "TabulationStrategy",
    "get_strategy",
]
