from .AppConfig import AppConfig
from .BaseDto import BaseDto
from .Clock import Clock, FixedClock, SystemClock
from .DatabaseHandler import DatabaseHandler
from .LoggingConfigurator import LoggingConfigurator
from .TimeUtils import TimeUtils
from .UnitOfWork import UnitOfWork

__all__ = [
    "AppConfig",
    "BaseDto",
    "Clock",
    "DatabaseHandler",
    "FixedClock",
    "LoggingConfigurator",
    "SystemClock",
    "TimeUtils",
    "UnitOfWork",
]
