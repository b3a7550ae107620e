"""Subtask operations and the markdown checklist rendered into GitHub issues.

The checklist block is appended after the issue's free-text description and
always starts with the same marker, so re-rendering first strips everything
from the marker onward. Running the sync twice never duplicates the block.
"""

import math
from datetime import datetime, timezone
from typing import List, Optional, TypedDict

from ghtasks.engine.errors import TaskNotFoundError
from ghtasks.models.constants import SUBTASK_SECTION_HEADER, SUBTASK_SECTION_MARKER
from ghtasks.models.task import Subtask, TaskRecord
from ghtasks.models.task_factory import create_subtask


class SubtaskProgress(TypedDict):
    completed: int
    total: int
    percentage: int


def _percent(part: int, total: int) -> int:
    # Half-up rounding, so 1/8 -> 13%
    return int(math.floor(part * 100 / total + 0.5))


def calculate_subtask_progress(subtasks: List[Subtask]) -> SubtaskProgress:
    if not subtasks:
        return {"completed": 0, "total": 0, "percentage": 0}
    completed = sum(1 for st in subtasks if st.completed)
    total = len(subtasks)
    return {"completed": completed, "total": total, "percentage": _percent(completed, total)}


def format_subtasks_markdown(subtasks: List[Subtask]) -> str:
    """Render subtasks as a markdown checklist section (empty string for none)."""
    if not subtasks:
        return ""

    lines = [SUBTASK_SECTION_HEADER]
    for subtask in sorted(subtasks, key=lambda st: st.order):
        checkbox = "[x]" if subtask.completed else "[ ]"
        lines.append(f"- {checkbox} {subtask.title}\n")
        if subtask.notes and subtask.notes.strip():
            lines.append(f"  - *{subtask.notes.strip()}*\n")

    progress = calculate_subtask_progress(subtasks)
    lines.append(
        f"\n**Progress: {progress['completed']}/{progress['total']} complete ({progress['percentage']}%)**\n"
    )
    return "".join(lines)


def extract_main_description(body: Optional[str]) -> str:
    """Return the issue body without any previously rendered subtask section."""
    if not body:
        return ""
    index = body.find(SUBTASK_SECTION_MARKER)
    return body[:index] if index != -1 else body


def build_issue_body(description: Optional[str], subtasks: List[Subtask]) -> str:
    """Combine a description with a freshly rendered subtask section."""
    # The section marker begins one newline into the header, so trailing
    # whitespace has to go or every re-sync would add a blank line.
    main = extract_main_description(description or "").rstrip()
    return main + format_subtasks_markdown(subtasks)


def _renumber(subtasks: List[Subtask]) -> List[Subtask]:
    return [st.model_copy(update={"order": index}) for index, st in enumerate(subtasks)]


def _find(task: TaskRecord, subtask_id: str) -> Subtask:
    for subtask in task.subtasks:
        if subtask.id == subtask_id:
            return subtask
    raise TaskNotFoundError(subtask_id)


def add_subtask(task: TaskRecord, title: str, *, now: Optional[datetime] = None) -> TaskRecord:
    subtask = create_subtask(title, order=len(task.subtasks), now=now)
    return task.model_copy(update={"subtasks": [*task.subtasks, subtask]})


def toggle_subtask(task: TaskRecord, subtask_id: str, *, now: Optional[datetime] = None) -> TaskRecord:
    target = _find(task, subtask_id)
    completed = not target.completed
    updated = target.model_copy(
        update={
            "completed": completed,
            "completed_at": (now or datetime.now(timezone.utc)) if completed else None,
        }
    )
    return task.model_copy(
        update={"subtasks": [updated if st.id == subtask_id else st for st in task.subtasks]}
    )


def update_subtask(task: TaskRecord, subtask_id: str, *, title: Optional[str] = None,
                   notes: Optional[str] = None) -> TaskRecord:
    target = _find(task, subtask_id)
    changes = {}
    if title is not None and title.strip():
        changes["title"] = title.strip()
    if notes is not None:
        changes["notes"] = notes
    updated = target.model_copy(update=changes)
    return task.model_copy(
        update={"subtasks": [updated if st.id == subtask_id else st for st in task.subtasks]}
    )


def delete_subtask(task: TaskRecord, subtask_id: str) -> TaskRecord:
    _find(task, subtask_id)
    remaining = [st for st in task.subtasks if st.id != subtask_id]
    return task.model_copy(update={"subtasks": _renumber(remaining)})


def reorder_subtasks(task: TaskRecord, drag_index: int, drop_index: int) -> TaskRecord:
    """Move the subtask at ``drag_index`` to ``drop_index`` and renumber orders."""
    ordered = sorted(task.subtasks, key=lambda st: st.order)
    if not 0 <= drag_index < len(ordered):
        raise IndexError(f"Subtask index out of range: {drag_index}")
    moved = ordered.pop(drag_index)
    drop_index = max(0, min(drop_index, len(ordered)))
    ordered.insert(drop_index, moved)
    return task.model_copy(update={"subtasks": _renumber(ordered)})
