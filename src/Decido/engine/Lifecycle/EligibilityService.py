from typing import Optional

from Decido.dto.ActorRef import ActorRef
from Decido.dto.DecisionDto import DecisionDto
from Decido.dto.ParticipantDto import ParticipantDto
from Decido.share.enums.ActorKind import ActorKind
from Decido.share.enums.VotingMode import VotingMode


class EligibilityService:
    """
    提供参与资格判断的服务。
    """

    @staticmethod
    def is_eligible(participant: Optional[ParticipantDto]) -> bool:
        """名单中存在且未被取消资格的参与者才有资格提交。"""
        return participant is not None and participant.is_eligible

    @staticmethod
    def can_self_register(decision: DecisionDto, actor: ActorRef) -> bool:
        """
        公开匿名决策中，持有令牌的外部参与者在第一次提交时自动登记。
        内部成员始终需要由成员管理方登记。
        """
        return (
            decision.voting_mode == VotingMode.PUBLIC_ANONYMOUS
            and actor.kind == ActorKind.EXTERNAL
        )

    @staticmethod
    def is_creator(decision: DecisionDto, actor: ActorRef) -> bool:
        return decision.creator_key == actor.key
