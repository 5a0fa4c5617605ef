from datetime import datetime

from pydantic import BaseModel, Field

from Decido.share.enums.ConsentStage import ConsentStage


class StageWindow(BaseModel):
    """
    同意式决策中一个阶段的时间窗口 [start, end)。
    """

    stage: ConsentStage = Field(..., description="阶段")
    start: datetime = Field(..., description="窗口开始时间 (UTC)，包含")
    end: datetime = Field(..., description="窗口结束时间 (UTC)，不包含")

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end
