from typing import Optional

from Decido.share.BaseDto import BaseDto
from Decido.share.enums.ActorKind import ActorKind


class ParticipantDto(BaseDto):
    id: int
    decision_id: int
    actor_key: str
    actor_kind: ActorKind
    user_id: Optional[str] = None
    external_token: Optional[str] = None
    display_name: Optional[str] = None
    is_eligible: bool
    has_voted: bool
