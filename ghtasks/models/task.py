"""Task data model for ghtasks.

Field aliases are the exact camelCase names used in the remote JSON document;
Python code uses the snake_case attribute names.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from ghtasks.models.constants import MAX_TAGS_PER_TASK


TaskId = Union[int, str]


class Priority(str, Enum):
    """Task priority enumeration."""
    P0 = "P0"
    P1 = "P1"


def _unique(values: List[str]) -> List[str]:
    """Deduplicate while preserving order."""
    seen = set()
    out: List[str] = []
    for value in values:
        if value not in seen:
            seen.add(value)
            out.append(value)
    return out


class Subtask(BaseModel):
    """Checklist item attached to a task."""

    id: str = Field(..., description="Unique subtask identifier")
    title: str = Field(..., description="Subtask title")
    completed: bool = Field(False, description="Whether the subtask is completed")
    notes: str = Field("", description="Optional notes/context")
    order: int = Field(0, description="Position in the subtask list")
    created_at: datetime = Field(..., alias="createdAt", description="Creation timestamp")
    completed_at: Optional[datetime] = Field(None, alias="completedAt", description="Completion timestamp")

    @model_validator(mode="after")
    def _check_completion(self):
        if not self.completed:
            self.completed_at = None
        elif self.completed_at is None:
            raise ValueError("completed subtask requires completedAt")
        return self

    class Config:
        """Pydantic configuration."""
        populate_by_name = True
        extra = "allow"


class TaskRecord(BaseModel):
    """Canonical one-off task as persisted in the remote document."""

    id: TaskId = Field(..., description="Unique opaque task identifier")
    title: str = Field(..., description="Task title")
    priority: Priority = Field(Priority.P1, description="Task priority")
    completed: bool = Field(False, description="Whether the task is completed")
    completed_at: Optional[datetime] = Field(None, alias="completedAt", description="Completion timestamp")
    project: Optional[str] = Field(None, description="Project name (must exist in document projects)")
    themes: List[str] = Field(default_factory=list, description="Themes of the project this task belongs to")
    tags: List[str] = Field(default_factory=list, description="Cross-cutting tags (max 3)")
    due_date: Optional[datetime] = Field(None, alias="dueDate", description="Due timestamp")
    created: datetime = Field(..., description="Creation timestamp")

    description: Optional[str] = Field(None, description="Free-text description (mirrors the linked issue body)")
    subtasks: List[Subtask] = Field(default_factory=list, description="Checklist items")
    github_issue_number: Optional[int] = Field(
        None, alias="githubIssueNumber", description="Linked GitHub issue, if any"
    )

    @field_validator("themes")
    @classmethod
    def _validate_themes(cls, v):
        return _unique(v)

    @field_validator("tags")
    @classmethod
    def _validate_tags(cls, v):
        return _unique(v)[:MAX_TAGS_PER_TASK]

    @model_validator(mode="after")
    def _check_invariants(self):
        if not self.completed:
            self.completed_at = None
        elif self.completed_at is None:
            raise ValueError("completed task requires completedAt")
        # Themes only mean something inside a project
        if self.project is None:
            self.themes = []
        return self

    class Config:
        """Pydantic configuration."""
        populate_by_name = True
        use_enum_values = True
        extra = "allow"
