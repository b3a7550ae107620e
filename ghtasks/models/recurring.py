"""Recurring task model for ghtasks."""

from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ghtasks.models.task import TaskId


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"


class RecurringTaskRecord(BaseModel):
    """Habit-style task tracked by the calendar days it was completed on."""

    id: TaskId = Field(..., description="Unique opaque identifier")
    title: str = Field(..., description="Recurring task title")
    project: Optional[str] = Field(None, description="Project name")
    frequency: Frequency = Field(Frequency.DAILY, description="How often the task recurs")
    completions: List[date] = Field(default_factory=list, description="Calendar days the task was completed")
    created: datetime = Field(..., description="Creation timestamp")

    @field_validator("completions")
    @classmethod
    def _validate_completions(cls, v):
        # Deduplicate but preserve order
        seen = set()
        out: List[date] = []
        for day in v:
            if day not in seen:
                seen.add(day)
                out.append(day)
        return out

    class Config:
        """Pydantic configuration."""
        populate_by_name = True
        use_enum_values = True
        extra = "allow"
