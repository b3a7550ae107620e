"""In-memory task operations for ghtasks.

All functions are pure: they return new lists/records and never mutate their
inputs. Persisting the result is the caller's job (see TaskSession).
"""

from datetime import date, datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, TypeVar

from ghtasks.engine.errors import TaskNotFoundError
from ghtasks.models.recurring import RecurringTaskRecord
from ghtasks.models.task import TaskId, TaskRecord

T = TypeVar("T", TaskRecord, RecurringTaskRecord)

VIEWS = ("all", "today", "update-eta", "unassigned", "summary")


def index_of(items: Sequence[T], item_id: TaskId) -> int:
    for index, item in enumerate(items):
        if item.id == item_id:
            return index
    raise TaskNotFoundError(item_id)


def _by_alias(model_cls, updates: Dict[str, Any]) -> Dict[str, Any]:
    """Rewrite attribute-name keys to their JSON aliases."""
    out: Dict[str, Any] = {}
    for key, value in updates.items():
        field = model_cls.model_fields.get(key)
        out[(field.alias or key) if field else key] = value
    return out


def _local_date(value: datetime) -> date:
    return value.astimezone().date() if value.tzinfo else value.date()


def _today() -> date:
    return datetime.now().astimezone().date()


def find_task(items: Sequence[T], item_id: TaskId) -> T:
    return items[index_of(items, item_id)]


def toggle_task_completion(
    tasks: List[TaskRecord], task_id: TaskId, *, now: Optional[datetime] = None
) -> List[TaskRecord]:
    """Flip a task's completed flag, keeping completedAt in step."""
    index = index_of(tasks, task_id)
    task = tasks[index]
    completed = not task.completed
    toggled = task.model_copy(
        update={
            "completed": completed,
            "completed_at": (now or datetime.now(timezone.utc)) if completed else None,
        }
    )
    return [*tasks[:index], toggled, *tasks[index + 1:]]


def toggle_recurring_completion(
    recurring_tasks: List[RecurringTaskRecord], task_id: TaskId, *, today: Optional[date] = None
) -> List[RecurringTaskRecord]:
    """Add today's date to the completions, or remove it if already present."""
    index = index_of(recurring_tasks, task_id)
    task = recurring_tasks[index]
    today = today or _today()
    if today in task.completions:
        completions = [d for d in task.completions if d != today]
    else:
        completions = [*task.completions, today]
    toggled = task.model_copy(update={"completions": completions})
    return [*recurring_tasks[:index], toggled, *recurring_tasks[index + 1:]]


def _check_project(project: Optional[str], projects: Sequence[str]) -> None:
    if project is not None and project not in projects:
        raise ValueError(f"Unknown project: {project}")


def _check_themes(project: Optional[str], themes: Sequence[str],
                  themes_by_project: Mapping[str, Sequence[str]]) -> None:
    allowed = themes_by_project.get(project, []) if project is not None else []
    unknown = [theme for theme in themes if theme not in allowed]
    if unknown:
        raise ValueError(f"Unknown theme(s) for project {project!r}: {', '.join(unknown)}")


def update_task(
    tasks: List[TaskRecord],
    task_id: TaskId,
    updates: Dict[str, Any],
    *,
    projects: Sequence[str],
    themes_by_project: Mapping[str, Sequence[str]],
) -> List[TaskRecord]:
    """Apply field updates to one task and re-validate it.

    ``updates`` may use attribute names or JSON aliases. The id cannot be
    changed. A new ``project`` must be one of ``projects`` and new ``themes``
    must belong to the task's project; moving a task to another project
    without naming themes drops its old ones.

    Raises:
        ValueError: If the update references an unknown project or theme, or
            the merged task fails validation
    """
    index = index_of(tasks, task_id)
    current = tasks[index]
    incoming = _by_alias(TaskRecord, updates)
    incoming.pop("id", None)
    merged = {**current.model_dump(by_alias=True), **incoming}
    if "completed" in incoming and "completedAt" not in incoming:
        if merged["completed"] and merged.get("completedAt") is None:
            merged["completedAt"] = datetime.now(timezone.utc)

    if "project" in incoming:
        _check_project(merged["project"], projects)
        if merged["project"] != current.project and "themes" not in incoming:
            merged["themes"] = []
    if "project" in incoming or "themes" in incoming:
        _check_themes(merged["project"], merged.get("themes") or [], themes_by_project)

    updated = TaskRecord.model_validate(merged)
    return [*tasks[:index], updated, *tasks[index + 1:]]


def update_recurring_task(
    recurring_tasks: List[RecurringTaskRecord],
    task_id: TaskId,
    updates: Dict[str, Any],
    *,
    projects: Sequence[str],
) -> List[RecurringTaskRecord]:
    index = index_of(recurring_tasks, task_id)
    incoming = _by_alias(RecurringTaskRecord, updates)
    incoming.pop("id", None)
    if "project" in incoming:
        _check_project(incoming["project"], projects)
    merged = {**recurring_tasks[index].model_dump(by_alias=True), **incoming}
    updated = RecurringTaskRecord.model_validate(merged)
    return [*recurring_tasks[:index], updated, *recurring_tasks[index + 1:]]


def delete_task(tasks: List[TaskRecord], task_id: TaskId) -> List[TaskRecord]:
    index_of(tasks, task_id)
    return [t for t in tasks if t.id != task_id]


def delete_recurring_task(
    recurring_tasks: List[RecurringTaskRecord], task_id: TaskId
) -> List[RecurringTaskRecord]:
    index_of(recurring_tasks, task_id)
    return [t for t in recurring_tasks if t.id != task_id]


def reorder(items: List[T], item_id: TaskId, new_index: int) -> List[T]:
    """Move one item to ``new_index`` (clamped to the list bounds)."""
    index = index_of(items, item_id)
    reordered = list(items)
    moved = reordered.pop(index)
    new_index = max(0, min(new_index, len(reordered)))
    reordered.insert(new_index, moved)
    return reordered


def filter_tasks(
    tasks: List[TaskRecord],
    view: str = "all",
    show_completed: bool = False,
    priority_filter: str = "all",
    project_filter: str = "all",
    *,
    today: Optional[date] = None,
) -> List[TaskRecord]:
    """Select the tasks shown in a view.

    Views:
    - all: everything passing the completed/priority/project filters
    - today: due today
    - update-eta: undated or overdue (needs a new due date)
    - unassigned: no project or no themes
    - summary: due today and completed today (ignores the other filters)
    """
    if view not in VIEWS:
        raise ValueError(f"Unknown view: {view}")
    today = today or _today()

    if view == "summary":
        return [
            t for t in tasks
            if t.due_date is not None and _local_date(t.due_date) == today
            and t.completed and t.completed_at is not None
            and _local_date(t.completed_at) == today
        ]

    filtered = tasks if show_completed else [t for t in tasks if not t.completed]
    if priority_filter != "all":
        filtered = [t for t in filtered if t.priority == priority_filter]
    if project_filter != "all":
        filtered = [t for t in filtered if t.project == project_filter]

    if view == "today":
        filtered = [t for t in filtered if t.due_date is not None and _local_date(t.due_date) == today]
    elif view == "update-eta":
        filtered = [t for t in filtered if t.due_date is None or _local_date(t.due_date) < today]
    elif view == "unassigned":
        filtered = [t for t in filtered if not t.project or not t.themes]
    return filtered


def filter_recurring_tasks(
    recurring_tasks: List[RecurringTaskRecord], project_filter: str = "all"
) -> List[RecurringTaskRecord]:
    if project_filter == "all":
        return recurring_tasks
    return [t for t in recurring_tasks if t.project == project_filter]
