"""Record creation factory for ghtasks.

This module centralizes creation of tasks, recurring tasks and subtasks so that
ids, timestamps and default values are consistent across the application.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ghtasks.models.recurring import Frequency, RecurringTaskRecord
from ghtasks.models.task import Priority, Subtask, TaskRecord
from ghtasks.parser.text_parser import TaskDraft


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Generate a new opaque record identifier (UUID v4)."""
    return str(uuid.uuid4())


def create_task_defaults() -> Dict[str, Any]:
    """Get default task values as a dictionary."""
    return {
        "priority": Priority.P1,
        "completed": False,
        "completed_at": None,
        "project": None,
        "themes": [],
        "tags": [],
        "due_date": None,
        "description": None,
        "subtasks": [],
        "github_issue_number": None,
    }


def create_task_from_draft(draft: TaskDraft, *, now: Optional[datetime] = None) -> TaskRecord:
    """Create a new, open TaskRecord from parser output.

    Args:
        draft: Parsed quick-capture text
        now: Creation timestamp (defaults to current UTC time)

    Returns:
        TaskRecord with a fresh id and defaults applied

    Raises:
        ValueError: If the draft title is empty
    """
    if not draft.title.strip():
        raise ValueError("Task title is required")

    defaults = create_task_defaults()
    return TaskRecord(
        id=new_id(),
        title=draft.title,
        priority=draft.priority,
        completed=defaults["completed"],
        completed_at=defaults["completed_at"],
        project=draft.project,
        themes=list(draft.themes) if draft.project else defaults["themes"],
        tags=list(draft.tags),
        due_date=draft.due_date,
        created=now or _utcnow(),
        description=defaults["description"],
        subtasks=defaults["subtasks"],
        github_issue_number=defaults["github_issue_number"],
    )


def create_recurring_task(
    title: str,
    project: Optional[str] = None,
    frequency: Frequency = Frequency.DAILY,
    *,
    now: Optional[datetime] = None,
) -> RecurringTaskRecord:
    """Create a recurring task with no completions yet."""
    title = (title or "").strip()
    if not title:
        raise ValueError("Recurring task title is required")
    return RecurringTaskRecord(
        id=new_id(),
        title=title,
        project=project,
        frequency=frequency,
        completions=[],
        created=now or _utcnow(),
    )


def create_subtask(title: str, order: int = 0, *, now: Optional[datetime] = None) -> Subtask:
    """Create an open subtask at the given position."""
    title = (title or "").strip()
    if not title:
        raise ValueError("Subtask title is required")
    return Subtask(
        id=f"subtask_{uuid.uuid4().hex[:12]}",
        title=title,
        completed=False,
        notes="",
        order=order,
        created_at=now or _utcnow(),
        completed_at=None,
    )
