from enum import Enum


class EntryKind(str, Enum):
    """写入投票账本的条目类型，用于阶段权限判断"""

    BALLOT = "BALLOT"
    CONSENSUS_VOTE = "CONSENSUS_VOTE"
    MENTION_SET = "MENTION_SET"
    OPINION = "OPINION"
    OBJECTION = "OBJECTION"
    CLARIFICATION_QUESTION = "CLARIFICATION_QUESTION"
    CLARIFICATION_ANSWER = "CLARIFICATION_ANSWER"
    PROPOSAL_STATE = "PROPOSAL_STATE"
