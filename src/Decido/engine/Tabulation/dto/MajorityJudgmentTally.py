from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from Decido.share.enums.NuancedScale import NuancedScale

from .TallyDto import TallyDto


class ProposalJudgment(BaseModel):
    """
    单个提案的评价结果
    """

    proposal_id: int
    title: str
    vote_count: int = Field(..., description="给出评语的人数")
    mention_counts: Dict[str, int] = Field(
        default_factory=dict, description="各评语的数量，按从好到差排列"
    )
    majority_mention: Optional[str] = Field(None, description="多数评语，无人投票时为空")
    share_above: float = Field(0.0, description="评价高于多数评语的比例")
    share_below: float = Field(0.0, description="评价低于多数评语的比例")
    rank: Optional[int] = Field(None, description="名次，并列时名次相同")
    is_winner: bool = False


class MajorityJudgmentTally(TallyDto):
    scale: NuancedScale
    winner_count: int
    voter_count: int
    results: List[ProposalJudgment] = []  # 按名次排列
    winners: List[int] = []
