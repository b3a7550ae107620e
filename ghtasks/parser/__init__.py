"""Quick-capture text parsing for ghtasks."""

from ghtasks.parser.text_parser import DEFAULT_MARKERS, MarkerConvention, TaskDraft, parse_task_text

__all__ = [
    "DEFAULT_MARKERS",
    "MarkerConvention",
    "TaskDraft",
    "parse_task_text",
]
