"""Constants for ghtasks.

This module centralizes seed data, limits and default values used throughout the application.
"""

from typing import Dict, List


# Seed taxonomy used when the remote document has no projects/themes yet
DEFAULT_PROJECTS: List[str] = ["Personal", "Work", "Health", "Home"]
DEFAULT_THEMES: Dict[str, List[str]] = {
    "Work": ["Q4 Goals", "Client Projects"],
    "Personal": ["Self Improvement", "Hobbies", "Finances"],
    "Health": ["Fitness", "Nutrition"],
    "Home": ["Maintenance", "Organization"],
}

# Tags
MAX_TAGS_PER_TASK = 3
SUGGESTED_TAGS_COUNT = 3
MAX_TAG_SEARCH_RESULTS = 10
DEFAULT_TAG_COLORS = [
    "#ef4444",  # red
    "#f97316",  # orange
    "#eab308",  # yellow
    "#22c55e",  # green
    "#3b82f6",  # blue
    "#8b5cf6",  # purple
    "#ec4899",  # pink
    "#6b7280",  # gray
]

# Recurring task scoring
DAILY_SCORE_WINDOW_DAYS = 7
WEEKLY_SCORE_WINDOW_WEEKS = 4
SCORE_THRESHOLD_GREEN = 100
SCORE_THRESHOLD_YELLOW = 60

# Subtask markdown block appended to GitHub issue bodies
SUBTASK_SECTION_HEADER = "\n\n---\n\n## Subtasks\n\n"
SUBTASK_SECTION_MARKER = "\n---\n\n## Subtasks"

# Remote document
DOCUMENT_JSON_INDENT = 2
