"""Tests for tag registry, search and bulk tag edits."""

import pytest

from ghtasks.engine.tags import (
    build_tag_registry,
    count_filtered_tasks,
    delete_tag_from_tasks,
    filter_tasks_by_tags,
    generate_tag_color,
    get_frequent_tags,
    normalize_tag_name,
    rename_tag_in_tasks,
    search_tags,
)
from ghtasks.models.constants import DEFAULT_TAG_COLORS
from ghtasks.models.task import TaskRecord


@pytest.fixture
def tasks(sample_task_base):
    return [
        TaskRecord(**{**sample_task_base, "id": "1", "tags": ["work", "urgent"]}),
        TaskRecord(**{**sample_task_base, "id": "2", "tags": ["work", "email"]}),
        TaskRecord(**{**sample_task_base, "id": "3", "tags": ["work", "workout", "home"]}),
        TaskRecord(**{**sample_task_base, "id": "4", "tags": []}),
    ]


@pytest.mark.parametrize(
    "raw,expected",
    [("Work", "work"), ("  Deep Work! ", "deepwork"), ("q4_goals-2", "q4_goals-2"), ("", "")],
)
def test_normalize_tag_name(raw, expected):
    assert normalize_tag_name(raw) == expected


class TestTagColor:
    def test_color_is_from_palette_and_stable(self):
        color = generate_tag_color("work")
        assert color in DEFAULT_TAG_COLORS
        assert generate_tag_color("work") == color

    def test_known_hash(self):
        # hash("a") == 97, 97 % 8 == 1
        assert generate_tag_color("a") == DEFAULT_TAG_COLORS[1]

    def test_long_names_do_not_overflow(self):
        assert generate_tag_color("x" * 200) in DEFAULT_TAG_COLORS


class TestRegistry:
    def test_counts_usage(self, tasks):
        registry = build_tag_registry(tasks)
        assert registry["work"]["task_count"] == 3
        assert registry["urgent"]["task_count"] == 1
        assert registry["work"]["color"] == generate_tag_color("work")

    def test_frequent_tags(self, tasks):
        frequent = get_frequent_tags(build_tag_registry(tasks))
        assert len(frequent) == 3
        assert frequent[0]["name"] == "work"

    def test_search_prefers_prefix_matches(self, tasks):
        results = search_tags(build_tag_registry(tasks), "or")
        assert [r["name"] for r in results] == ["work", "workout"]
        results = search_tags(build_tag_registry(tasks), "wo")
        assert [r["name"] for r in results] == ["work", "workout"]

    def test_search_blank_query(self, tasks):
        assert search_tags(build_tag_registry(tasks), "  ") == []


class TestFilterByTags:
    def test_or_logic(self, tasks):
        result = filter_tasks_by_tags(tasks, ["urgent", "home"])
        assert [t.id for t in result] == ["1", "3"]

    def test_no_filter_returns_everything(self, tasks):
        assert filter_tasks_by_tags(tasks, []) == tasks
        assert count_filtered_tasks(tasks, ["work"]) == 3


class TestBulkEdits:
    def test_rename(self, tasks):
        renamed = rename_tag_in_tasks(tasks, "urgent", "asap")
        assert renamed[0].tags == ["work", "asap"]
        assert renamed[1] is tasks[1]

    def test_rename_onto_existing_merges(self, tasks):
        renamed = rename_tag_in_tasks(tasks, "workout", "work")
        assert renamed[2].tags == ["work", "home"]

    def test_delete(self, tasks):
        cleaned = delete_tag_from_tasks(tasks, "work")
        assert all("work" not in t.tags for t in cleaned)
        assert cleaned[2].tags == ["workout", "home"]
