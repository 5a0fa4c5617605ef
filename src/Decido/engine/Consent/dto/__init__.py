from .ConsentResolution import ConsentResolution
from .StageWindow import StageWindow

__all__ = ["ConsentResolution", "StageWindow"]
