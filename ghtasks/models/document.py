"""Remote document aggregate for ghtasks.

The whole dataset (tasks, recurring tasks, projects and themes) is persisted as
one JSON blob. Writes always submit the complete document.
"""

import copy
import json
from typing import Any, Dict, List

from pydantic import BaseModel, Field, field_validator

from ghtasks.models.constants import DEFAULT_PROJECTS, DEFAULT_THEMES, DOCUMENT_JSON_INDENT
from ghtasks.models.recurring import RecurringTaskRecord
from ghtasks.models.task import TaskRecord


# Opaque revision identifier (GitHub blob SHA)
VersionTag = str


def _default_projects() -> List[str]:
    return list(DEFAULT_PROJECTS)


def _default_themes() -> Dict[str, List[str]]:
    return copy.deepcopy(DEFAULT_THEMES)


class Document(BaseModel):
    """Full aggregate persisted as a single remote JSON file."""

    tasks: List[TaskRecord] = Field(default_factory=list, description="One-off tasks, in display order")
    recurring_tasks: List[RecurringTaskRecord] = Field(
        default_factory=list, alias="recurringTasks", description="Recurring tasks, in display order"
    )
    projects: List[str] = Field(default_factory=_default_projects, description="Known project names")
    themes: Dict[str, List[str]] = Field(
        default_factory=_default_themes, description="Theme vocabulary per project"
    )

    @field_validator("projects")
    @classmethod
    def _validate_projects(cls, v):
        seen = set()
        unique: List[str] = []
        for name in v:
            if name not in seen:
                seen.add(name)
                unique.append(name)
        return unique

    def to_json_dict(self) -> Dict[str, Any]:
        """Return the document in its wire shape (camelCase keys, JSON-safe values)."""
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self) -> str:
        return json.dumps(self.to_json_dict(), indent=DOCUMENT_JSON_INDENT)

    @classmethod
    def from_json_dict(cls, data: Dict[str, Any]) -> "Document":
        """Build a document from decoded JSON, defaulting absent or null top-level fields."""
        if not isinstance(data, dict):
            raise ValueError(f"Document must be a JSON object, got {type(data).__name__}")
        cleaned = {key: value for key, value in data.items() if value is not None}
        return cls.model_validate(cleaned)

    def reference_problems(self) -> List[str]:
        """List referential-integrity violations (unknown projects/themes).

        Returns an empty list for a consistent document. Never raises: documents
        written by other clients are reported on, not rejected.
        """
        problems: List[str] = []
        known = set(self.projects)
        for task in self.tasks:
            if task.project is None:
                continue
            if task.project not in known:
                problems.append(f"task {task.id}: unknown project {task.project!r}")
                continue
            project_themes = set(self.themes.get(task.project, []))
            for theme in task.themes:
                if theme not in project_themes:
                    problems.append(f"task {task.id}: unknown theme {theme!r} for project {task.project!r}")
        for recurring in self.recurring_tasks:
            if recurring.project is not None and recurring.project not in known:
                problems.append(f"recurring task {recurring.id}: unknown project {recurring.project!r}")
        return problems

    class Config:
        """Pydantic configuration."""
        populate_by_name = True
        extra = "allow"
