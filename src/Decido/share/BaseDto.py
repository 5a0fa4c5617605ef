from pydantic import BaseModel, ConfigDict


class BaseDto(BaseModel):
    """
    所有 DTO 与查询对象 (Qo) 的基类，统一配置。
    允许直接从 ORM 对象构建 (from_attributes)。
    """

    model_config = ConfigDict(from_attributes=True)
