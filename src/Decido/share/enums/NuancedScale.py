from enum import Enum
from typing import List


class NuancedScale(str, Enum):
    """评价式投票可选的评语等级"""

    THREE_LEVELS = "3_LEVELS"  # 三级
    FIVE_LEVELS = "5_LEVELS"  # 五级
    SEVEN_LEVELS = "7_LEVELS"  # 七级

    @property
    def mentions(self) -> List[str]:
        """按从最好到最差的顺序返回该等级下的全部评语。"""
        return list(_SCALE_MENTIONS[self])

    def rank_of(self, mention: str) -> int:
        """
        返回评语在等级中的位置，0 表示最好。
        评语不属于该等级时抛出 ValueError。
        """
        return _SCALE_MENTIONS[self].index(mention)


_SCALE_MENTIONS = {
    NuancedScale.THREE_LEVELS: ("GOOD", "PASSABLE", "INSUFFICIENT"),
    NuancedScale.FIVE_LEVELS: ("EXCELLENT", "GOOD", "PASSABLE", "INSUFFICIENT", "TO_REJECT"),
    NuancedScale.SEVEN_LEVELS: (
        "EXCELLENT",
        "VERY_GOOD",
        "GOOD",
        "PASSABLE",
        "INSUFFICIENT",
        "VERY_INSUFFICIENT",
        "TO_REJECT",
    ),
}
