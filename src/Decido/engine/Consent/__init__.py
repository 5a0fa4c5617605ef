from .ConsentWorkflow import ConsentWorkflow
from .StageClock import STAGE_SEQUENCES, StageClock
from .StagePermissions import StagePermissions

__all__ = ["ConsentWorkflow", "STAGE_SEQUENCES", "StageClock", "StagePermissions"]
