from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from Decido.dto.LedgerSnapshot import LedgerSnapshot
from Decido.share.enums.ConsentStage import ConsentStage
from Decido.share.enums.DecisionType import DecisionType

from .dto.TabulationOutcome import TabulationOutcome
from .dto.TallyDto import TallyDto


class TabulationStrategy(ABC):
    """
    计票策略的基类，每种决策协议对应一个实现。
    所有方法都是纯函数，只读取传入的快照，空输入时返回中性结果而不抛出异常。
    """

    decision_type: DecisionType

    @abstractmethod
    def tally(self, snapshot: LedgerSnapshot, stage: Optional[ConsentStage] = None) -> TallyDto:
        """根据快照生成当前的计票结果。"""

    @abstractmethod
    def evaluate(
        self, snapshot: LedgerSnapshot, stage: Optional[ConsentStage] = None
    ) -> TabulationOutcome:
        """
        判断在不考虑截止时间的情况下，决策是否已经可以结束。
        """

    def deadline_outcome(self, snapshot: LedgerSnapshot) -> TabulationOutcome:
        """
        截止时间到达后的结论。默认不因截止时间结束。
        """
        return TabulationOutcome(result=None, reason="该协议不会因截止时间自动结束")

    @staticmethod
    def _common_fields(snapshot: LedgerSnapshot, actor_keys: List[str]) -> Dict[str, Any]:
        decision = snapshot.decision
        return {
            "decision_id": decision.id,
            "decision_type": decision.decision_type,
            "status": decision.status,
            "result": decision.result,
            "voters": snapshot.visible_voters(actor_keys),
        }
