from typing import List

from .TallyDto import TallyDto


class AdviceTally(TallyDto):
    """
    征求意见的收集进度。发起人不计入被征求者。
    """

    received_count: int
    total_solicited: int
    all_received: bool
    pending: List[str] = []
