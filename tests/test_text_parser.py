"""Tests for the quick-capture text parser (deterministic, never raises)."""

from datetime import datetime, timedelta, timezone

import pytest

from ghtasks.models.task import Priority
from ghtasks.parser.text_parser import MarkerConvention, TaskDraft, parse_task_text


PROJECTS = ["Personal", "Work", "Health", "Home"]
THEMES = {
    "Work": ["Q4 Goals", "Client Projects"],
    "Personal": ["Self Improvement", "Hobbies", "Finances"],
}


class TestPriority:
    def test_defaults_to_p1(self, fixed_now):
        draft = parse_task_text("Buy milk", PROJECTS, THEMES, now=fixed_now)
        assert draft.priority == Priority.P1

    def test_extracts_p0_case_insensitive(self, fixed_now):
        draft = parse_task_text("Fix prod P0 bug", PROJECTS, THEMES, now=fixed_now)
        assert draft.priority == Priority.P0
        assert draft.title == "Fix prod bug"

    def test_only_first_priority_token_is_consumed(self, fixed_now):
        draft = parse_task_text("p0 then p1", PROJECTS, THEMES, now=fixed_now)
        assert draft.priority == Priority.P0
        assert draft.title == "then p1"

    def test_priority_inside_a_word_is_ignored(self, fixed_now):
        draft = parse_task_text("Read chap01 notes", PROJECTS, THEMES, now=fixed_now)
        assert draft.priority == Priority.P1
        assert draft.title == "Read chap01 notes"

    def test_marker_prefixed_priority_is_a_tag(self, fixed_now):
        draft = parse_task_text("Triage #p0", PROJECTS, THEMES, now=fixed_now)
        assert draft.priority == Priority.P1
        assert draft.tags == ["p0"]


class TestTags:
    def test_tag_cap_drops_fourth_tag(self, fixed_now):
        draft = parse_task_text("buy milk #a #b #c #d", [], {}, now=fixed_now)
        assert draft.tags == ["a", "b", "c"]
        assert "#" not in draft.title
        assert draft.title == "buy milk"

    def test_tags_are_lowercased_and_deduplicated(self, fixed_now):
        draft = parse_task_text("Clean #Home #home #garage-2", PROJECTS, THEMES, now=fixed_now)
        assert draft.tags == ["home", "garage-2"]
        assert draft.title == "Clean"

    def test_tag_never_sets_project(self, fixed_now):
        draft = parse_task_text("Task #Nonexistent", ["Work"], {}, now=fixed_now)
        assert draft.project is None
        assert "#Nonexistent" not in draft.title
        assert draft.title == "Task"


class TestProject:
    def test_known_project_matches_case_insensitively(self, fixed_now):
        draft = parse_task_text("Standup @work", PROJECTS, THEMES, now=fixed_now)
        assert draft.project == "Work"
        assert draft.title == "Standup"

    def test_unknown_project_is_dropped_silently(self, fixed_now):
        draft = parse_task_text("Task @Nonexistent", ["Work"], {}, now=fixed_now)
        assert draft.project is None
        assert "@Nonexistent" not in draft.title
        assert draft.title == "Task"

    def test_no_partial_project_match(self, fixed_now):
        draft = parse_task_text("Task @Wor", ["Work"], {}, now=fixed_now)
        assert draft.project is None

    def test_only_first_project_marker_is_used(self, fixed_now):
        draft = parse_task_text("Plan @Home @Work", PROJECTS, THEMES, now=fixed_now)
        assert draft.project == "Home"
        assert draft.title == "Plan @Work"


class TestThemes:
    def test_themes_match_by_substring_within_project(self, fixed_now):
        draft = parse_task_text("Plan +q4 +client @Work", PROJECTS, THEMES, now=fixed_now)
        assert draft.project == "Work"
        assert draft.themes == ["Q4 Goals", "Client Projects"]
        assert draft.title == "Plan"

    def test_duplicate_theme_matches_are_suppressed(self, fixed_now):
        draft = parse_task_text("Plan @Work +q4 +goals", PROJECTS, THEMES, now=fixed_now)
        assert draft.themes == ["Q4 Goals"]

    def test_unmatched_theme_token_is_removed(self, fixed_now):
        draft = parse_task_text("Plan @Work +zzz", PROJECTS, THEMES, now=fixed_now)
        assert draft.themes == []
        assert draft.title == "Plan"

    def test_theme_tokens_stay_without_project(self, fixed_now):
        draft = parse_task_text("Plan +q4", PROJECTS, THEMES, now=fixed_now)
        assert draft.themes == []
        assert draft.title == "Plan +q4"


class TestDueDate:
    def test_today(self, fixed_now):
        draft = parse_task_text("Exercise today", PROJECTS, THEMES, now=fixed_now)
        assert draft.due_date == fixed_now
        assert draft.title == "Exercise"

    def test_tomorrow(self, fixed_now):
        draft = parse_task_text("Buy milk Tomorrow", PROJECTS, THEMES, now=fixed_now)
        assert draft.due_date == fixed_now + timedelta(days=1)
        assert draft.title == "Buy milk"

    def test_numeric_month_day_uses_current_year(self, fixed_now):
        draft = parse_task_text("Meeting p0 12/25 #Work", ["Work"], {}, now=fixed_now)
        assert draft.priority == Priority.P0
        assert draft.due_date == datetime(2026, 12, 25, tzinfo=timezone.utc)
        assert draft.tags == ["work"]
        assert draft.project is None
        assert draft.title == "Meeting"

    def test_numeric_with_dash_and_two_digit_year(self, fixed_now):
        draft = parse_task_text("Pay rent 1-5-27", PROJECTS, THEMES, now=fixed_now)
        assert draft.due_date == datetime(2027, 1, 5, tzinfo=timezone.utc)
        assert draft.title == "Pay rent"

    @pytest.mark.parametrize("text", ["Party dec 25", "Party December 25"])
    def test_month_name_and_day(self, fixed_now, text):
        draft = parse_task_text(text, PROJECTS, THEMES, now=fixed_now)
        assert draft.due_date == datetime(2026, 12, 25, tzinfo=timezone.utc)
        assert draft.title == "Party"

    def test_month_name_with_year(self, fixed_now):
        draft = parse_task_text("Renew passport mar 3 2027", PROJECTS, THEMES, now=fixed_now)
        assert draft.due_date == datetime(2027, 3, 3, tzinfo=timezone.utc)
        assert draft.title == "Renew passport"

    def test_invalid_calendar_date_is_discarded(self, fixed_now):
        draft = parse_task_text("Review 2/30", PROJECTS, THEMES, now=fixed_now)
        assert draft.due_date is None
        assert draft.title == "Review 2/30"

    def test_word_starting_with_month_abbreviation_is_not_a_date(self, fixed_now):
        draft = parse_task_text("decide 5 options", PROJECTS, THEMES, now=fixed_now)
        assert draft.due_date is None

    def test_invalid_leftmost_date_does_not_fall_back(self, fixed_now):
        draft = parse_task_text("Review 13/45 dec 25", PROJECTS, THEMES, now=fixed_now)
        assert draft.due_date is None
        assert draft.title == "Review 13/45 dec 25"

    def test_leftmost_date_wins(self, fixed_now):
        draft = parse_task_text("dec 25 prep for 1/2", PROJECTS, THEMES, now=fixed_now)
        assert draft.due_date == datetime(2026, 12, 25, tzinfo=timezone.utc)
        assert draft.title == "prep for 1/2"


class TestTitleAndDeterminism:
    def test_everything_combined(self, fixed_now):
        draft = parse_task_text(
            "  Call   dentist p0 tomorrow #health @Personal +self  ", PROJECTS, THEMES, now=fixed_now
        )
        assert draft == TaskDraft(
            title="Call dentist",
            priority=Priority.P0,
            project="Personal",
            themes=["Self Improvement"],
            tags=["health"],
            due_date=fixed_now + timedelta(days=1),
        )

    def test_only_markers_yields_empty_title(self, fixed_now):
        draft = parse_task_text("p0 #a @Work", PROJECTS, THEMES, now=fixed_now)
        assert draft.title == ""

    def test_empty_input(self, fixed_now):
        draft = parse_task_text("", PROJECTS, THEMES, now=fixed_now)
        assert draft.title == ""
        assert draft.due_date is None

    def test_same_input_same_output(self, fixed_now):
        text = "Meeting p0 12/25 #Work @Work +q4"
        assert parse_task_text(text, PROJECTS, THEMES, now=fixed_now) == parse_task_text(
            text, PROJECTS, THEMES, now=fixed_now
        )

    def test_custom_marker_convention(self, fixed_now):
        markers = MarkerConvention(tag="!", project="%", theme="~")
        draft = parse_task_text("Ship !release %work ~client", PROJECTS, THEMES, now=fixed_now, markers=markers)
        assert draft.tags == ["release"]
        assert draft.project == "Work"
        assert draft.themes == ["Client Projects"]
        assert draft.title == "Ship"

    @pytest.mark.parametrize(
        "kwargs",
        [{"project": "#"}, {"tag": "+"}, {"theme": "@"}, {"tag": "ab"}, {"project": "w"}, {"theme": ""}],
    )
    def test_invalid_marker_convention_rejected(self, kwargs):
        with pytest.raises(ValueError):
            MarkerConvention(**kwargs)
