from typing import List

from .TallyDto import TallyDto


class ConsensusTally(TallyDto):
    """
    一致同意投票的进度。
    只有全部有效参与者的最新记录都是 AGREE 时 unanimous 才为 True。
    """

    eligible_count: int
    agree_count: int
    disagree_count: int
    pending_count: int
    unanimous: bool
    disagreeing: List[str] = []
