import json
import logging
import os
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class AppConfig(BaseModel):
    """
    应用配置，从 config.json 读取。
    文件缺失或字段缺失时使用默认值。
    """

    sweep_interval_minutes: float = Field(default=2, gt=0, description="到期决策扫描间隔（分钟）")
    default_timezone: str = Field(default="Europe/Paris", description="按时长计算截止时间时的默认时区")
    consent_min_duration_hours: int = Field(
        default=7 * 24, ge=0, description="同意式决策的最短持续时间（小时）"
    )
    consent_stage_weights: Dict[str, List[int]] = Field(
        default_factory=lambda: {"DISTINCT": [1, 1, 1, 1], "MERGED": [1, 1, 1]},
        description="同意式决策各阶段的时长权重，按阶段顺序排列",
    )

    @classmethod
    def load(cls, path: Optional[str] = None) -> "AppConfig":
        """
        从 JSON 文件加载配置。
        path 为 None 时读取环境变量 CONFIG_PATH，默认为 config.json。
        """
        config_path = path or os.getenv("CONFIG_PATH", "config.json")
        if not os.path.exists(config_path):
            logger.info(f"未找到配置文件 '{config_path}'，使用默认配置。")
            return cls()

        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        logger.info(f"已从 '{config_path}' 加载配置。")
        return cls.model_validate(data)
