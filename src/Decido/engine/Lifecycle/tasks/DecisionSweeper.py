import asyncio
import logging
import random
from datetime import datetime
from typing import TYPE_CHECKING, Dict, Optional

from Decido.share.enums.DecisionResult import DecisionResult

if TYPE_CHECKING:
    from ..DecisionLifecycle import DecisionLifecycle

logger = logging.getLogger(__name__)


class DecisionSweeper:
    """
    后台扫描任务: 定期结束已到期的决策，并推进同意式决策的阶段。
    每个决策在独立的事务中处理，单个决策失败不会影响其他决策。
    """

    def __init__(self, lifecycle: "DecisionLifecycle", interval_minutes: float = 2):
        self.lifecycle = lifecycle
        self.interval_seconds = interval_minutes * 60
        self._task: Optional[asyncio.Task] = None

    def start(self):
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._loop())
            logger.info(f"决策扫描任务已启动，间隔 {self.interval_seconds:.0f} 秒。")

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("决策扫描任务已停止。")

    async def _loop(self):
        # 增加随机延迟以错开多个实例的启动时间
        await asyncio.sleep(random.uniform(0, min(30, self.interval_seconds)))
        while True:
            await self.run_once()
            await asyncio.sleep(self.interval_seconds)

    async def run_once(self, now: Optional[datetime] = None) -> Dict[int, DecisionResult]:
        """
        执行一轮扫描。

        Returns:
            本轮被结束的决策及其结果。
        """
        logger.info("开始检查需要推进的决策...")
        closed: Dict[int, DecisionResult] = {}
        try:
            candidate_ids = await self.lifecycle.list_sweep_candidates(now)
        except Exception as e:
            logger.error(f"获取待扫描决策列表时发生严重错误: {e}", exc_info=True)
            return closed

        if not candidate_ids:
            logger.info("没有需要推进的决策。")
            return closed

        for decision_id in candidate_ids:
            try:
                result = await self.lifecycle.sweep_decision(decision_id, now)
                if result is not None:
                    closed[decision_id] = result
            except Exception as e:
                # 单个决策处理失败，记录日志并继续处理下一个
                logger.error(f"处理决策 {decision_id} 时出错: {e}", exc_info=True)

        logger.info(f"本轮扫描完成，检查 {len(candidate_ids)} 个决策，结束 {len(closed)} 个。")
        return closed
