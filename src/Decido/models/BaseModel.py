from typing import Optional

from sqlmodel import Field, SQLModel


class BaseModel(SQLModel):
    """
    所有数据模型的基类。
    - 字段名即数据库列名，统一使用蛇形命名。
    - 提供通用的自增主键。
    """

    id: Optional[int] = Field(default=None, primary_key=True)
