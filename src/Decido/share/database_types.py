import json
from typing import Any

from sqlalchemy import TEXT, TypeDecorator
from sqlalchemy.dialects.postgresql import JSONB


class JsonEncoded(TypeDecorator):
    """
    将决策历史的附加信息 (dict) 序列化为 JSON 字符串，存放在 TEXT 列中。
    SQLite 没有原生 JSON 列类型，因此需要这一层转换。
    """

    impl = TEXT
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Any) -> str | None:
        if value is None:
            return None
        # 保证中文原样写入，便于直接查看数据库
        return json.dumps(value, ensure_ascii=False, default=str)

    def process_result_value(self, value: str | None, dialect: Any) -> Any | None:
        if value is None:
            return None
        return json.loads(value)


# PostgreSQL 使用 JSONB，其他数据库回退到 JsonEncoded
JSON_TYPE = JSONB().with_variant(JsonEncoded, "sqlite", "mysql")
