import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

from Decido.share.enums.ConsentStage import ConsentStage
from Decido.share.enums.ConsentStepMode import ConsentStepMode
from Decido.share.errors.InvalidConfiguration import InvalidConfiguration

from .dto.StageWindow import StageWindow

logger = logging.getLogger(__name__)

STAGE_SEQUENCES: Dict[ConsentStepMode, Sequence[ConsentStage]] = {
    ConsentStepMode.DISTINCT: (
        ConsentStage.CLARIFICATIONS,
        ConsentStage.AVIS,
        ConsentStage.AMENDEMENTS,
        ConsentStage.OBJECTIONS,
    ),
    ConsentStepMode.MERGED: (
        ConsentStage.CLARIFAVIS,
        ConsentStage.AMENDEMENTS,
        ConsentStage.OBJECTIONS,
    ),
}

_MICROSECOND = timedelta(microseconds=1)


class StageClock:
    """
    根据决策的开始时间、截止时间与阶段划分方式计算各阶段的时间窗口。

    总时长按权重在各阶段之间分配，默认每个阶段等长。
    边界以整数微秒计算，最后一个窗口的结束时间固定为决策的截止时间。
    """

    def __init__(self, weights: Optional[Dict[str, Sequence[int]]] = None):
        self._weights: Dict[ConsentStepMode, List[int]] = {
            mode: [1] * len(stages) for mode, stages in STAGE_SEQUENCES.items()
        }
        for mode_name, mode_weights in (weights or {}).items():
            try:
                mode = ConsentStepMode(mode_name)
            except ValueError:
                raise InvalidConfiguration(f"未知的阶段划分方式: {mode_name}")
            self._weights[mode] = self._validate_weights(mode, mode_weights)

    @staticmethod
    def _validate_weights(mode: ConsentStepMode, weights: Sequence[int]) -> List[int]:
        expected = len(STAGE_SEQUENCES[mode])
        if len(weights) != expected:
            raise InvalidConfiguration(
                f"{mode.value} 模式需要 {expected} 个阶段权重，实际为 {len(weights)} 个。"
            )
        if any(int(w) != w or w <= 0 for w in weights):
            raise InvalidConfiguration(f"{mode.value} 模式的阶段权重必须为正整数: {list(weights)}")
        return [int(w) for w in weights]

    def compute_stages(
        self, start: datetime, end: datetime, step_mode: ConsentStepMode
    ) -> List[StageWindow]:
        """
        计算有序、首尾相接、互不重叠的阶段窗口，窗口并集恰好为 [start, end]。

        Raises:
            InvalidConfiguration: start 不早于 end，或某个窗口的长度不为正。
        """
        if start >= end:
            raise InvalidConfiguration("阶段划分要求开始时间早于截止时间。")

        step_mode = ConsentStepMode(step_mode)
        stages = STAGE_SEQUENCES[step_mode]
        weights = self._weights[step_mode]
        total_weight = sum(weights)
        total_us = (end - start) // _MICROSECOND

        windows: List[StageWindow] = []
        cumulative = 0
        window_start = start
        for index, stage in enumerate(stages):
            cumulative += weights[index]
            if index == len(stages) - 1:
                window_end = end
            else:
                window_end = start + timedelta(microseconds=total_us * cumulative // total_weight)
            if window_end <= window_start:
                raise InvalidConfiguration(
                    f"决策时长过短，阶段 {stage.value} 的时间窗口长度不为正。"
                )
            windows.append(StageWindow(stage=stage, start=window_start, end=window_end))
            window_start = window_end

        return windows

    @staticmethod
    def current_stage(
        now: datetime, stages: Sequence[StageWindow], closed: bool = False
    ) -> Optional[ConsentStage]:
        """
        返回 now 所在窗口的阶段。
        决策已结束或 now 不早于最后窗口的结束时间时返回 TERMINEE；
        没有窗口或 now 早于开始时间时返回 None。
        """
        if closed:
            return ConsentStage.TERMINEE
        if not stages:
            return None
        if now < stages[0].start:
            return None
        if now >= stages[-1].end:
            return ConsentStage.TERMINEE
        for window in stages:
            if window.contains(now):
                return window.stage
        return None
