from typing import Optional

from pydantic import BaseModel

from Decido.share.enums.ConsentStage import ConsentStage


class ConsentResolution(BaseModel):
    """
    某一时刻同意式决策的有效阶段。

    clock_stage 为仅由时钟决定的阶段；stage 还考虑了决策状态与发起人的决定。
    implicit_keep 为 True 表示修订阶段已经结束而发起人没有作出决定，
    应当视为保持原提案并持久化这一默认决定。
    """

    stage: Optional[ConsentStage] = None
    clock_stage: Optional[ConsentStage] = None
    implicit_keep: bool = False
