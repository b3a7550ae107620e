"""Tag library utilities.

Tags are global (not scoped to a project) and matched on their normalized
form: lowercase, only ``a-z0-9-_``.
"""

import re
from typing import Dict, Iterable, List, TypedDict

from ghtasks.models.constants import (
    DEFAULT_TAG_COLORS,
    MAX_TAG_SEARCH_RESULTS,
    MAX_TAGS_PER_TASK,
    SUGGESTED_TAGS_COUNT,
)
from ghtasks.models.task import TaskRecord

_INVALID_TAG_CHARS = re.compile(r"[^a-z0-9\-_]")


class TagInfo(TypedDict):
    color: str
    task_count: int


class TagEntry(TagInfo):
    name: str


def normalize_tag_name(name: str) -> str:
    return _INVALID_TAG_CHARS.sub("", (name or "").lower().strip())


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value >= (1 << 31) else value


def generate_tag_color(tag_name: str) -> str:
    """Pick a palette color from a stable hash of the tag name."""
    h = 0
    for ch in tag_name:
        h = ord(ch) + (_to_int32(_to_int32(h) << 5) - h)
    return DEFAULT_TAG_COLORS[abs(h) % len(DEFAULT_TAG_COLORS)]


def build_tag_registry(tasks: Iterable[TaskRecord]) -> Dict[str, TagInfo]:
    """Map each normalized tag to its color and the number of tasks using it."""
    registry: Dict[str, TagInfo] = {}
    for task in tasks:
        for tag in task.tags:
            normalized = normalize_tag_name(tag)
            if not normalized:
                continue
            if normalized not in registry:
                registry[normalized] = {"color": generate_tag_color(normalized), "task_count": 0}
            registry[normalized]["task_count"] += 1
    return registry


def get_frequent_tags(registry: Dict[str, TagInfo], count: int = SUGGESTED_TAGS_COUNT) -> List[TagEntry]:
    ranked = sorted(registry.items(), key=lambda item: item[1]["task_count"], reverse=True)
    return [{"name": name, **info} for name, info in ranked[:count]]


def search_tags(registry: Dict[str, TagInfo], query: str) -> List[TagEntry]:
    """Tags containing the query; prefix matches first, then by usage."""
    normalized = normalize_tag_name(query)
    if not normalized:
        return []
    matches = [(name, info) for name, info in registry.items() if normalized in name]
    matches.sort(key=lambda item: (not item[0].startswith(normalized), -item[1]["task_count"]))
    return [{"name": name, **info} for name, info in matches[:MAX_TAG_SEARCH_RESULTS]]


def _matches_any(task: TaskRecord, wanted: List[str]) -> bool:
    task_tags = {normalize_tag_name(t) for t in task.tags}
    return any(tag in task_tags for tag in wanted)


def filter_tasks_by_tags(tasks: List[TaskRecord], active_filters: List[str]) -> List[TaskRecord]:
    """Tasks carrying ANY of the active tag filters (all tasks when no filter)."""
    if not active_filters:
        return tasks
    wanted = [normalize_tag_name(f) for f in active_filters]
    return [t for t in tasks if _matches_any(t, wanted)]


def count_filtered_tasks(tasks: List[TaskRecord], active_filters: List[str]) -> int:
    return len(filter_tasks_by_tags(tasks, active_filters))


def rename_tag_in_tasks(tasks: List[TaskRecord], old_name: str, new_name: str) -> List[TaskRecord]:
    """Rename a tag everywhere; renaming onto an existing tag merges the two."""
    old = normalize_tag_name(old_name)
    new = normalize_tag_name(new_name)
    if not old or not new or old == new:
        return tasks

    renamed = []
    for task in tasks:
        if old not in {normalize_tag_name(t) for t in task.tags}:
            renamed.append(task)
            continue
        tags = [t for t in task.tags if normalize_tag_name(t) != old]
        if new not in {normalize_tag_name(t) for t in tags}:
            tags.append(new)
        renamed.append(task.model_copy(update={"tags": tags[:MAX_TAGS_PER_TASK]}))
    return renamed


def delete_tag_from_tasks(tasks: List[TaskRecord], tag_name: str) -> List[TaskRecord]:
    target = normalize_tag_name(tag_name)
    return [
        task.model_copy(update={"tags": [t for t in task.tags if normalize_tag_name(t) != target]})
        for task in tasks
    ]
