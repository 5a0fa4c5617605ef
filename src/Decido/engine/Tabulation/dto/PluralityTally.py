from typing import List

from pydantic import BaseModel, Field

from .TallyDto import TallyDto


class ProposalCount(BaseModel):
    """
    单个提案的得票
    """

    proposal_id: int = Field(..., description="提案ID")
    title: str = Field(..., description="提案标题")
    count: int = Field(..., description="得票数")
    percentage: float = Field(..., description="占总票数的百分比，保留一位小数")


class PluralityTally(TallyDto):
    total_ballots: int
    proposals: List[ProposalCount] = []
    winners: List[int] = []  # 得票最多的全部提案，平票时有多个
