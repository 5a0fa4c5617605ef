from .AlreadyDecided import AlreadyDecided
from .DecisionError import DecisionError
from .DecisionNotFound import DecisionNotFound
from .IncompleteSubmission import IncompleteSubmission
from .InvalidConfiguration import InvalidConfiguration
from .NotEligible import NotEligible
from .StageClosed import StageClosed

__all__ = [
    "AlreadyDecided",
    "DecisionError",
    "DecisionNotFound",
    "IncompleteSubmission",
    "InvalidConfiguration",
    "NotEligible",
    "StageClosed",
]
