"""Helper modules made available to templates."""

from .date import DateModule
from .note import NoteModule
from .tasks import TasksModule
from .time import TimeModule
from .utility import UtilityModule

__all__ = [
    "DateModule",
    "NoteModule",
    "TasksModule",
    "TimeModule",
    "UtilityModule",
]
