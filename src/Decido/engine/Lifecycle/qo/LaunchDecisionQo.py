from datetime import datetime
from typing import Optional

from Decido.share.BaseDto import BaseDto


class LaunchDecisionQo(BaseDto):
    """
    启动决策的查询对象。
    截止时间可以直接给出，也可以按时区内的持续小时数计算。
    """

    start_time: Optional[datetime] = None
    """开始时间，为空时使用当前时间"""

    end_time: Optional[datetime] = None
    """截止时间"""

    duration_hours: Optional[int] = None
    """持续小时数，仅在未给出 end_time 时使用"""

    timezone: Optional[str] = None
    """计算持续时间所用的时区，为空时使用配置中的默认时区"""

    initial_proposal: Optional[str] = None
    """同意式决策的初始提案文本，给出时覆盖草稿中的文本"""
