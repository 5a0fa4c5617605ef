from .DecisionSweeper import DecisionSweeper

__all__ = ["DecisionSweeper"]
