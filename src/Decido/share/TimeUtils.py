import logging
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)


class TimeUtils:
    """
    一个用于处理时间相关操作的工具类。
    数据库中的所有时间均以朴素 (naive) 的 UTC datetime 存储。
    """

    @staticmethod
    def utcnow() -> datetime:
        """返回当前时间，朴素的 UTC datetime。"""
        return datetime.now(timezone.utc).replace(tzinfo=None)

    @staticmethod
    def to_naive_utc(value: datetime | None) -> datetime | None:
        """
        将任意 datetime 规范化为朴素的 UTC datetime。
        不带时区信息的输入被视为已经是 UTC。
        """
        if value is None:
            return None
        if value.tzinfo is None:
            return value
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    @staticmethod
    def get_utc_end_time(
        duration_hours: int, target_tz: str, start_time: datetime | None = None
    ) -> datetime:
        """
        根据本地时区的持续时间计算出准确的 UTC 截止时间。

        Args:
            duration_hours: 持续的小时数。
            target_tz: 目标时区的 IANA 名称，例如 "Europe/Paris"。
            start_time: 计算的起始时间。朴素时间视为 UTC；为 None 时使用当前时间。

        Returns:
            一个代表截止时间的、朴素的 UTC datetime 对象。
        """
        if start_time is None:
            now_utc = datetime.now(timezone.utc)
        elif start_time.tzinfo is None:
            now_utc = start_time.replace(tzinfo=timezone.utc)
        else:
            now_utc = start_time

        try:
            target_zone = ZoneInfo(target_tz)
        except ZoneInfoNotFoundError:
            logger.warning(f"无效的时区 '{target_tz}'。将回退到 UTC。")
            target_zone = ZoneInfo("UTC")

        # 在本地时区下计算，使跨越夏令时切换的持续时间按“墙上时间”计算
        now_local = now_utc.astimezone(target_zone).replace(tzinfo=None)
        end_time_local = (now_local + timedelta(hours=duration_hours)).replace(
            tzinfo=target_zone
        )

        return end_time_local.astimezone(timezone.utc).replace(tzinfo=None)
