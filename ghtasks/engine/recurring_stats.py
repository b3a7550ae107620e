"""Completion scoring for recurring tasks.

Daily tasks score one point per completed day over the last 7 days; weekly
tasks score one point per week (Sunday to Saturday) with any completion over
the last 4 weeks.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

from ghtasks.models.constants import (
    DAILY_SCORE_WINDOW_DAYS,
    SCORE_THRESHOLD_GREEN,
    SCORE_THRESHOLD_YELLOW,
    WEEKLY_SCORE_WINDOW_WEEKS,
)
from ghtasks.models.recurring import Frequency, RecurringTaskRecord


@dataclass(frozen=True)
class RecurringStats:
    total_score: int
    max_score: int
    percentage: int
    completed_today: int
    total_tasks: int


def last_days(today: date, count: int = DAILY_SCORE_WINDOW_DAYS) -> List[date]:
    """The ``count`` days ending today, oldest first."""
    return [today - timedelta(days=offset) for offset in range(count - 1, -1, -1)]


def _week_start(day: date) -> date:
    # Sunday-based weeks
    return day - timedelta(days=(day.weekday() + 1) % 7)


def get_completion_score(completions: Iterable[date], frequency: str, today: date) -> int:
    done = set(completions)
    if frequency == Frequency.DAILY:
        return sum(1 for day in last_days(today) if day in done)

    score = 0
    current_start = _week_start(today)
    for weeks_back in range(WEEKLY_SCORE_WINDOW_WEEKS):
        start = current_start - timedelta(weeks=weeks_back)
        end = start + timedelta(days=6)
        if any(start <= day <= end for day in done):
            score += 1
    return score


def max_score_for(frequency: str) -> int:
    return DAILY_SCORE_WINDOW_DAYS if frequency == Frequency.DAILY else WEEKLY_SCORE_WINDOW_WEEKS


def calculate_recurring_stats(
    recurring_tasks: List[RecurringTaskRecord], *, today: Optional[date] = None
) -> RecurringStats:
    today = today or datetime.now().astimezone().date()
    total_score = 0
    max_score = 0
    completed_today = 0

    for task in recurring_tasks:
        total_score += get_completion_score(task.completions, task.frequency, today)
        max_score += max_score_for(task.frequency)
        if today in task.completions:
            completed_today += 1

    percentage = int(math.floor(total_score * 100 / max_score + 0.5)) if max_score else 0
    return RecurringStats(
        total_score=total_score,
        max_score=max_score,
        percentage=percentage,
        completed_today=completed_today,
        total_tasks=len(recurring_tasks),
    )


def get_score_color(percentage: int) -> str:
    if percentage >= SCORE_THRESHOLD_GREEN:
        return "green"
    if percentage >= SCORE_THRESHOLD_YELLOW:
        return "yellow"
    return "red"
