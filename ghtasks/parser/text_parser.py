"""Natural-language parser for quick task capture.

Turns free text such as ``"Call dentist p0 tomorrow #health @Personal"`` into a
structured TaskDraft. It must be deterministic: same input (and same ``now``)
-> same output. It never raises; unparseable fragments degrade to null fields.

Marker convention: ``#`` tag, ``@`` project, ``+`` theme.

Passes run in a fixed order and each removes what it matched from the working
text, so later passes never see tokens consumed by earlier ones:
priority -> tags -> project -> themes -> due date -> title.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
import re
from typing import Dict, List, Mapping, Optional, Sequence

from ghtasks.models.constants import MAX_TAGS_PER_TASK
from ghtasks.models.task import Priority


@dataclass(frozen=True)
class MarkerConvention:
    """Prefix characters for tag, project and theme tokens.

    Each marker must be a single non-word character, distinct from the others.
    """

    tag: str = "#"
    project: str = "@"
    theme: str = "+"

    def __post_init__(self):
        markers = (self.tag, self.project, self.theme)
        for marker in markers:
            if len(marker) != 1 or re.match(r"\w|\s", marker):
                raise ValueError(f"Marker must be a single non-word character: {marker!r}")
        if len(set(markers)) != len(markers):
            raise ValueError(f"Markers must be distinct: {markers}")


DEFAULT_MARKERS = MarkerConvention()


@dataclass(frozen=True)
class TaskDraft:
    """Parsed-but-not-persisted task attributes."""

    title: str
    priority: Priority = Priority.P1
    project: Optional[str] = None
    themes: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    due_date: Optional[datetime] = None


_TOKEN = r"([A-Za-z0-9_-]+)"

_TOMORROW_RE = re.compile(r"\btomorrow\b", re.I)
_TODAY_RE = re.compile(r"\btoday\b", re.I)

_MONTHS: list[tuple[str, int]] = [
    ("january", 1), ("jan", 1),
    ("february", 2), ("feb", 2),
    ("march", 3), ("mar", 3),
    ("april", 4), ("apr", 4),
    ("may", 5),
    ("june", 6), ("jun", 6),
    ("july", 7), ("jul", 7),
    ("august", 8), ("aug", 8),
    ("september", 9), ("sept", 9), ("sep", 9),
    ("october", 10), ("oct", 10),
    ("november", 11), ("nov", 11),
    ("december", 12), ("dec", 12),
]
_MONTH_NUMBERS: Dict[str, int] = dict(_MONTHS)

# Numeric ("12/25", "1-5-27") or month name ("dec 25", "December 25 2027");
# the leftmost match wins.
_EXPLICIT_DATE_RE = re.compile(
    r"(?<![\d/-])(?P<num_month>\d{1,2})[/-](?P<num_day>\d{1,2})(?:[/-](?P<num_year>\d{4}|\d{2}))?(?![\d/-])"
    r"|\b(?P<name_month>" + "|".join(name for name, _ in _MONTHS) + r")\.?\s+(?P<name_day>\d{1,2})\b"
    r"(?:,?\s+(?P<name_year>\d{4})\b)?",
    re.I,
)


def _marker_pattern(marker: str) -> re.Pattern:
    return re.compile(r"(?<![\w])" + re.escape(marker) + _TOKEN)


def _priority_pattern(markers: MarkerConvention) -> re.Pattern:
    # A marker directly in front (e.g. "#p0") makes it a tag/project token, not a priority.
    guard = re.escape(markers.tag + markers.project + markers.theme)
    return re.compile(r"(?<![\w" + guard + r"])p[01]\b", re.I)


def _cut(text: str, match: re.Match) -> str:
    return text[: match.start()] + " " + text[match.end():]


def _normalize_whitespace(text: str) -> str:
    return " ".join(text.split())


def _extract_priority(text: str, markers: MarkerConvention) -> tuple[Priority, str]:
    m = _priority_pattern(markers).search(text)
    if not m:
        return Priority.P1, text
    return Priority(m.group(0).upper()), _cut(text, m)


def _extract_tags(text: str, markers: MarkerConvention) -> tuple[List[str], str]:
    pattern = _marker_pattern(markers.tag)
    tags: List[str] = []
    for raw in pattern.findall(text):
        tag = raw.lower()
        # Tokens past the cap are still consumed so they never leak into the title.
        if tag not in tags and len(tags) < MAX_TAGS_PER_TASK:
            tags.append(tag)
    return tags, pattern.sub(" ", text)


def _extract_project(
    text: str, known_projects: Sequence[str], markers: MarkerConvention
) -> tuple[Optional[str], str]:
    m = _marker_pattern(markers.project).search(text)
    if not m:
        return None, text
    wanted = m.group(1).lower()
    project = next((p for p in known_projects if p.lower() == wanted), None)
    return project, _cut(text, m)


def _extract_themes(
    text: str, project_themes: Sequence[str], markers: MarkerConvention
) -> tuple[List[str], str]:
    pattern = _marker_pattern(markers.theme)
    themes: List[str] = []
    for raw in pattern.findall(text):
        needle = raw.lower()
        matched = next((t for t in project_themes if needle in t.lower()), None)
        if matched is not None and matched not in themes:
            themes.append(matched)
    return themes, pattern.sub(" ", text)


def _expand_year(raw: Optional[str], default: int) -> int:
    if not raw:
        return default
    year = int(raw)
    return 2000 + year if len(raw) == 2 else year


def _calendar_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _extract_due_date(text: str, now: datetime) -> tuple[Optional[datetime], str]:
    m = _TOMORROW_RE.search(text)
    if m:
        return now + timedelta(days=1), _cut(text, m)
    m = _TODAY_RE.search(text)
    if m:
        return now, _cut(text, m)

    m = _EXPLICIT_DATE_RE.search(text)
    if not m:
        return None, text
    if m.group("num_month"):
        year, month, day = m.group("num_year"), int(m.group("num_month")), int(m.group("num_day"))
    else:
        month = _MONTH_NUMBERS[m.group("name_month").lower()]
        year, day = m.group("name_year"), int(m.group("name_day"))
    parsed = _calendar_date(_expand_year(year, now.year), month, day)
    if parsed is None:
        return None, text
    return datetime.combine(parsed, time(), tzinfo=now.tzinfo), _cut(text, m)


def parse_task_text(
    text: str,
    known_projects: Sequence[str],
    known_themes_by_project: Mapping[str, Sequence[str]],
    *,
    now: Optional[datetime] = None,
    markers: MarkerConvention = DEFAULT_MARKERS,
) -> TaskDraft:
    """Parse quick-capture text into a TaskDraft.

    Supported patterns:
    - "Meeting p0" -> priority P0 (default P1)
    - "buy milk #errands #home" -> tags (lowercased, max 3)
    - "standup @Work" -> project, only if it names a known project
    - "review @Work +q4" -> themes of the resolved project (substring match)
    - "today", "tomorrow", "12/25", "12-25-2027", "dec 25", "december 25 2027" -> due date

    An empty title is returned as-is; rejecting it is up to the caller.
    """
    now = now or datetime.now().astimezone()
    working = text or ""

    priority, working = _extract_priority(working, markers)
    tags, working = _extract_tags(working, markers)
    project, working = _extract_project(working, known_projects, markers)

    themes: List[str] = []
    if project is not None:
        themes, working = _extract_themes(working, known_themes_by_project.get(project, []), markers)

    due_date, working = _extract_due_date(working, now)

    return TaskDraft(
        title=_normalize_whitespace(working),
        priority=priority,
        project=project,
        themes=themes,
        tags=tags,
        due_date=due_date,
    )
