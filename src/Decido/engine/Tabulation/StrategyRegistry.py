from typing import Dict

from Decido.share.enums.DecisionType import DecisionType

from .AdviceStrategy import AdviceStrategy
from .ConsensusStrategy import ConsensusStrategy
from .ConsentStrategy import ConsentStrategy
from .MajorityJudgmentStrategy import MajorityJudgmentStrategy
from .PluralityStrategy import PluralityStrategy
from .TabulationStrategy import TabulationStrategy

_STRATEGIES: Dict[DecisionType, TabulationStrategy] = {
    strategy.decision_type: strategy
    for strategy in (
        PluralityStrategy(),
        ConsensusStrategy(),
        ConsentStrategy(),
        MajorityJudgmentStrategy(),
        AdviceStrategy(),
    )
}


def get_strategy(decision_type: DecisionType) -> TabulationStrategy:
    """根据决策协议类型返回对应的计票策略。"""
    return _STRATEGIES[DecisionType(decision_type)]
