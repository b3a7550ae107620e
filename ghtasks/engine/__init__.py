"""Task engine for ghtasks."""

from ghtasks.engine.errors import SaveInProgressError, TaskNotFoundError
from ghtasks.engine.task_operations import filter_tasks, reorder, toggle_recurring_completion, toggle_task_completion
from ghtasks.engine.recurring_stats import calculate_recurring_stats, get_score_color
from ghtasks.engine.session import TaskSession

__all__ = [
    "SaveInProgressError",
    "TaskNotFoundError",
    "filter_tasks",
    "reorder",
    "toggle_recurring_completion",
    "toggle_task_completion",
    "calculate_recurring_stats",
    "get_score_color",
    "TaskSession",
]
