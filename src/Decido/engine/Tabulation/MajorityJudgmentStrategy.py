from fractions import Fraction
from typing import Dict, List, Optional, Tuple

from Decido.dto.LedgerSnapshot import LedgerSnapshot
from Decido.share.enums.ConsentStage import ConsentStage
from Decido.share.enums.DecisionResult import DecisionResult
from Decido.share.enums.DecisionType import DecisionType
from Decido.share.enums.NuancedScale import NuancedScale

from .dto.MajorityJudgmentTally import MajorityJudgmentTally, ProposalJudgment
from .dto.TabulationOutcome import TabulationOutcome
from .TabulationStrategy import TabulationStrategy


class MajorityJudgmentStrategy(TabulationStrategy):
    """
    评价式投票（多数判断）。

    每个提案的多数评语是按从好到差排序后第 n // 2 个评语，
    偶数票时即两个中间值中较差的那个。
    排名依次比较:
        1. 多数评语，越好越靠前；
        2. 高于多数评语的比例减去低于多数评语的比例，越大越靠前；
        3. 仍然相同时保持提案的原始顺序。
    获胜者为排名前 nuanced_winner_count 的提案，与截断位置并列的提案全部计入。
    """

    decision_type = DecisionType.NUANCED_VOTE
    DEFAULT_SCALE = NuancedScale.FIVE_LEVELS

    def tally(
        self, snapshot: LedgerSnapshot, stage: Optional[ConsentStage] = None
    ) -> MajorityJudgmentTally:
        decision = snapshot.decision
        scale = decision.nuanced_scale or self.DEFAULT_SCALE
        mention_sets = snapshot.mention_sets()

        judgments: List[ProposalJudgment] = []
        keys: List[Tuple[int, Fraction]] = []
        for proposal in snapshot.proposals:
            ranks = sorted(
                scale.rank_of(mentions[proposal.id])
                for mentions in mention_sets.values()
                if proposal.id in mentions
            )
            judgment, key = self._judge(proposal.id, proposal.title, ranks, scale)
            judgments.append(judgment)
            keys.append(key)

        # sorted 是稳定排序，键相同的提案保持原始顺序
        order = sorted(range(len(judgments)), key=lambda i: keys[i])
        for i in order:
            # 并列的提案名次相同，名次 = 1 + 严格优于它的提案数量
            judgments[i].rank = 1 + sum(1 for k in keys if k < keys[i])

        winner_count = max(decision.nuanced_winner_count, 1)
        winners: List[int] = []
        if mention_sets and order:
            cutoff = keys[order[min(winner_count, len(order)) - 1]]
            for i in order:
                if keys[i] <= cutoff:
                    judgments[i].is_winner = True
                    winners.append(judgments[i].proposal_id)

        return MajorityJudgmentTally(
            **self._common_fields(snapshot, list(mention_sets.keys())),
            scale=scale,
            winner_count=winner_count,
            voter_count=len(mention_sets),
            results=[judgments[i] for i in order],
            winners=winners,
        )

    @staticmethod
    def _judge(
        proposal_id: int, title: str, ranks: List[int], scale: NuancedScale
    ) -> Tuple[ProposalJudgment, Tuple[int, Fraction]]:
        """
        计算单个提案的评价结果及其排名键。ranks 为已排序的评语位置 (0 为最好)。
        """
        mentions = scale.mentions
        counts: Dict[str, int] = {m: 0 for m in mentions}
        for r in ranks:
            counts[mentions[r]] += 1

        n = len(ranks)
        if n == 0:
            # 无人投票的提案排在所有有评语的提案之后
            judgment = ProposalJudgment(
                proposal_id=proposal_id, title=title, vote_count=0, mention_counts=counts
            )
            return judgment, (len(mentions), Fraction(0))

        majority = ranks[n // 2]
        above = sum(1 for r in ranks if r < majority)
        below = sum(1 for r in ranks if r > majority)
        judgment = ProposalJudgment(
            proposal_id=proposal_id,
            title=title,
            vote_count=n,
            mention_counts=counts,
            majority_mention=mentions[majority],
            share_above=round(above / n, 4),
            share_below=round(below / n, 4),
        )
        return judgment, (majority, -Fraction(above - below, n))

    def evaluate(
        self, snapshot: LedgerSnapshot, stage: Optional[ConsentStage] = None
    ) -> TabulationOutcome:
        return TabulationOutcome(result=None, reason="评价式投票在截止或撤回时结束")

    def deadline_outcome(self, snapshot: LedgerSnapshot) -> TabulationOutcome:
        if snapshot.mention_sets():
            return TabulationOutcome(result=DecisionResult.APPROVED, reason="截止时间已到，评价完成")
        return TabulationOutcome(result=DecisionResult.WITHDRAWN, reason="截止时间已到，无人评价")
