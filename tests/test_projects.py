"""Tests for project and theme management."""

import pytest

from ghtasks.engine.projects import add_project, add_theme, delete_project, delete_theme
from ghtasks.models.document import Document
from ghtasks.models.recurring import RecurringTaskRecord
from ghtasks.models.task import TaskRecord


@pytest.fixture
def document(sample_task_base, sample_recurring_base):
    return Document(
        tasks=[
            TaskRecord(**{**sample_task_base, "id": "w", "project": "Work", "themes": ["Q4 Goals", "Client Projects"]}),
            TaskRecord(**{**sample_task_base, "id": "p", "project": "Personal", "themes": ["Hobbies"]}),
        ],
        recurring_tasks=[RecurringTaskRecord(**{**sample_recurring_base, "project": "Work"})],
    )


class TestAddProject:
    def test_adds_project_with_empty_themes(self, document):
        updated = add_project(document, "  Garden ")
        assert updated.projects[-1] == "Garden"
        assert updated.themes["Garden"] == []
        assert "Garden" not in document.projects

    @pytest.mark.parametrize("name", ["", "   ", "Work"])
    def test_blank_or_duplicate_is_noop(self, document, name):
        assert add_project(document, name) is document


class TestDeleteProject:
    def test_removes_all_references(self, document):
        updated = delete_project(document, "Work")
        assert "Work" not in updated.projects
        assert "Work" not in updated.themes
        work_task = updated.tasks[0]
        assert work_task.project is None
        assert work_task.themes == []
        assert updated.recurring_tasks[0].project is None
        assert updated.reference_problems() == []

    def test_other_projects_untouched(self, document):
        updated = delete_project(document, "Work")
        assert updated.tasks[1].project == "Personal"
        assert updated.tasks[1].themes == ["Hobbies"]

    def test_unknown_project_is_noop(self, document):
        assert delete_project(document, "Garden") is document


class TestThemes:
    def test_add_theme(self, document):
        updated = add_theme(document, "Work", "Hiring")
        assert updated.themes["Work"] == ["Q4 Goals", "Client Projects", "Hiring"]

    def test_add_theme_to_unknown_project(self, document):
        with pytest.raises(ValueError):
            add_theme(document, "Garden", "Roses")

    def test_duplicate_theme_is_noop(self, document):
        assert add_theme(document, "Work", "Q4 Goals") is document

    def test_delete_theme_updates_tasks_of_that_project(self, document):
        updated = delete_theme(document, "Work", "Q4 Goals")
        assert updated.themes["Work"] == ["Client Projects"]
        assert updated.tasks[0].themes == ["Client Projects"]
        assert updated.reference_problems() == []

    def test_delete_unknown_theme_is_noop(self, document):
        assert delete_theme(document, "Work", "Nope") is document
