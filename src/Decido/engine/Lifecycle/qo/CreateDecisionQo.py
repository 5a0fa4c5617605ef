from typing import Optional

from Decido.share.BaseDto import BaseDto
from Decido.share.enums.ConsentStepMode import ConsentStepMode
from Decido.share.enums.DecisionType import DecisionType
from Decido.share.enums.NuancedScale import NuancedScale
from Decido.share.enums.VotingMode import VotingMode


class CreateDecisionQo(BaseDto):
    """
    创建决策草稿的查询对象
    """

    title: str
    """决策标题"""
    decision_type: DecisionType
    """决策协议类型"""

    description: Optional[str] = None
    """决策说明"""

    voting_mode: VotingMode = VotingMode.INVITED
    """参与方式"""

    nuanced_scale: Optional[NuancedScale] = None
    """评价式投票的评语等级，为空时使用五级"""

    nuanced_winner_count: int = 1
    """评价式投票的获胜数量"""

    consent_step_mode: Optional[ConsentStepMode] = None
    """同意式决策的阶段划分方式，为空时使用 DISTINCT"""

    initial_proposal: Optional[str] = None
    """同意式决策的初始提案文本"""
