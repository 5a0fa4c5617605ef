from enum import Enum


class DecisionLogEventType(str, Enum):
    """决策历史中的事件类型"""

    CREATED = "CREATED"
    PROPOSAL_ADDED = "PROPOSAL_ADDED"
    PARTICIPANT_ADDED = "PARTICIPANT_ADDED"
    LAUNCHED = "LAUNCHED"
    CLOSED = "CLOSED"
    VOTE_RECORDED = "VOTE_RECORDED"
    VOTE_UPDATED = "VOTE_UPDATED"
    OPINION_SUBMITTED = "OPINION_SUBMITTED"
    OPINION_UPDATED = "OPINION_UPDATED"
    FINAL_DECISION_MADE = "FINAL_DECISION_MADE"
    CONSENT_STAGE_CHANGED = "CONSENT_STAGE_CHANGED"
    CONSENT_QUESTION_POSTED = "CONSENT_QUESTION_POSTED"
    CONSENT_QUESTION_ANSWERED = "CONSENT_QUESTION_ANSWERED"
    CONSENT_PROPOSAL_AMENDED = "CONSENT_PROPOSAL_AMENDED"
    CONSENT_PROPOSAL_KEPT = "CONSENT_PROPOSAL_KEPT"
    CONSENT_PROPOSAL_WITHDRAWN = "CONSENT_PROPOSAL_WITHDRAWN"
    CONSENT_POSITION_RECORDED = "CONSENT_POSITION_RECORDED"
    CONSENT_POSITION_UPDATED = "CONSENT_POSITION_UPDATED"
