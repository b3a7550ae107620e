"""Data models for ghtasks."""

from ghtasks.models.task import Priority, Subtask, TaskId, TaskRecord
from ghtasks.models.recurring import Frequency, RecurringTaskRecord
from ghtasks.models.document import Document, VersionTag

__all__ = [
    "Priority",
    "Subtask",
    "TaskId",
    "TaskRecord",
    "Frequency",
    "RecurringTaskRecord",
    "Document",
    "VersionTag",
]
