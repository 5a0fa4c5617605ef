from typing import Optional

from Decido.share.BaseDto import BaseDto
from Decido.share.enums.ActorKind import ActorKind


class ActorRef(BaseDto):
    """
    操作者身份，由调用方（身份认证层）显式传入每个操作。
    内部成员以成员ID标识，外部参与者以令牌标识。
    """

    kind: ActorKind
    id: str
    display_name: Optional[str] = None

    @property
    def key(self) -> str:
        """在整个引擎中唯一且稳定的参与者标识。"""
        prefix = "member" if self.kind == ActorKind.MEMBER else "external"
        return f"{prefix}:{self.id}"

    @classmethod
    def member(cls, user_id: str, display_name: Optional[str] = None) -> "ActorRef":
        return cls(kind=ActorKind.MEMBER, id=str(user_id), display_name=display_name)

    @classmethod
    def external(cls, token: str, display_name: Optional[str] = None) -> "ActorRef":
        return cls(kind=ActorKind.EXTERNAL, id=token, display_name=display_name)
