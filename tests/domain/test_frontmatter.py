"""Tests for the document parser."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from taskdn.domain.frontmatter import (
    decode_frontmatter,
    parse_area,
    parse_project,
    parse_task,
    split_frontmatter,
)
from taskdn.domain.status import AreaStatus, ProjectStatus, TaskStatus
from taskdn.domain.values import CalendarDate, Filename, RelativePath, Timestamp, WikiLink
from taskdn.errors import InvalidFieldError, MissingFieldError, ParseError

BUY_MILK = """\
---
title: Buy milk
status: ready
created-at: 2025-01-10
updated-at: 2025-01-10T09:30:00
due: 2025-01-15
projects:
  - "[[Groceries]]"
area: "[[Home]]"
priority: high
---
Remember oat milk.
"""


class TestSplitFrontmatter:
    def test_body_is_verbatim(self) -> None:
        block, body = split_frontmatter("---\ntitle: x\n---\n\n# Notes\n\n- a\n")
        assert block == "title: x"
        assert body == "\n# Notes\n\n- a\n"

    def test_crlf_delimiters(self) -> None:
        block, body = split_frontmatter("---\r\ntitle: x\r\n---\r\nbody\r\n")
        assert block.strip() == "title: x"
        assert body == "body\r\n"

    def test_leading_bom_is_ignored(self) -> None:
        block, _ = split_frontmatter("\ufeff---\ntitle: x\n---\n")
        assert block == "title: x"

    def test_no_frontmatter(self) -> None:
        with pytest.raises(ParseError, match="no frontmatter"):
            split_frontmatter("# Just a heading\n")

    def test_unclosed(self) -> None:
        with pytest.raises(ParseError, match="not closed"):
            split_frontmatter("---\ntitle: x\n")

    def test_body_may_contain_delimiters(self) -> None:
        _, body = split_frontmatter("---\ntitle: x\n---\nabove\n---\nbelow\n")
        assert body == "above\n---\nbelow\n"


class TestDecodeFrontmatter:
    def test_timestamps_stay_text(self) -> None:
        fields = decode_frontmatter("a: 2025-01-10\nb: 2025-01-10T09:30:00")
        assert fields == {"a": "2025-01-10", "b": "2025-01-10T09:30:00"}

    def test_nested_values_become_plain(self) -> None:
        fields = decode_frontmatter("tags:\n  - a\n  - b\nmeta:\n  n: 1\n  ok: true")
        assert fields == {"tags": ["a", "b"], "meta": {"n": 1, "ok": True}}
        assert type(fields["meta"]) is dict

    def test_numeric_extras_compare_as_numbers(self) -> None:
        fields = decode_frontmatter("version: 1.10\ncode: 0o17\nbudget: 1_000")
        assert fields == {"version": 1.1, "code": 15, "budget": 1000}

    def test_empty_block(self) -> None:
        assert decode_frontmatter("") == {}

    def test_invalid_yaml(self) -> None:
        with pytest.raises(ParseError, match="invalid YAML"):
            decode_frontmatter("title: [unclosed")

    def test_non_mapping(self) -> None:
        with pytest.raises(ParseError, match="must be a mapping"):
            decode_frontmatter("- a\n- b")


class TestParseTask:
    def test_buy_milk(self) -> None:
        task = parse_task(BUY_MILK)
        assert task.title == "Buy milk"
        assert task.status is TaskStatus.READY
        assert task.created_at == CalendarDate(date(2025, 1, 10))
        assert task.updated_at == Timestamp(datetime(2025, 1, 10, 9, 30))
        assert task.due == CalendarDate(date(2025, 1, 15))
        assert task.project == WikiLink("Groceries")
        assert task.area == WikiLink("Home")
        assert task.extra == {"priority": "high"}
        assert task.body == "Remember oat milk.\n"
        assert task.path is None

    def test_legacy_singular_project(self) -> None:
        text = BUY_MILK.replace('projects:\n  - "[[Groceries]]"', "project: groceries.md")
        task = parse_task(text)
        assert task.project == Filename("groceries.md")
        assert task.projects_count is None

    def test_projects_list_wins_over_project(self) -> None:
        text = BUY_MILK.replace("priority: high", "project: other.md")
        task = parse_task(text)
        assert task.project == WikiLink("Groceries")
        assert task.projects_count == 1
        assert "project" not in task.extra

    def test_multiple_projects_keeps_first(self) -> None:
        text = BUY_MILK.replace('  - "[[Groceries]]"', '  - "[[A]]"\n  - "[[B]]"')
        task = parse_task(text)
        assert task.project == WikiLink("A")
        assert task.projects_count == 2

    def test_empty_projects_list(self) -> None:
        text = BUY_MILK.replace('projects:\n  - "[[Groceries]]"', "projects: []")
        task = parse_task(text)
        assert task.project is None
        assert task.projects_count == 0

    def test_unquoted_wikilink(self) -> None:
        text = BUY_MILK.replace('area: "[[Home]]"', "area: [[Home]]")
        assert parse_task(text).area == WikiLink("Home")

    def test_relative_path_reference(self) -> None:
        text = BUY_MILK.replace('area: "[[Home]]"', "area: ../areas/home.md")
        assert parse_task(text).area == RelativePath("../areas/home.md")

    def test_scheduled_and_defer_until(self) -> None:
        text = BUY_MILK.replace("due: 2025-01-15", "scheduled: 2025-01-12\ndefer-until: 2025-01-11")
        task = parse_task(text)
        assert task.scheduled == date(2025, 1, 12)
        assert task.defer_until == date(2025, 1, 11)

    def test_scheduled_rejects_time(self) -> None:
        text = BUY_MILK.replace("due: 2025-01-15", "scheduled: 2025-01-12T10:00:00")
        with pytest.raises(InvalidFieldError) as exc_info:
            parse_task(text)
        assert exc_info.value.field == "scheduled"

    def test_null_optional_is_absent(self) -> None:
        text = BUY_MILK.replace("due: 2025-01-15", "due:")
        assert parse_task(text).due is None

    @pytest.mark.parametrize("field", ["title", "status", "created-at", "updated-at"])
    def test_missing_required(self, field: str) -> None:
        lines = [line for line in BUY_MILK.splitlines() if not line.startswith(f"{field}:")]
        with pytest.raises(MissingFieldError) as exc_info:
            parse_task("\n".join(lines))
        assert exc_info.value.field == field

    def test_null_required_is_missing(self) -> None:
        with pytest.raises(MissingFieldError):
            parse_task(BUY_MILK.replace("title: Buy milk", "title:"))

    def test_unknown_status(self) -> None:
        with pytest.raises(InvalidFieldError, match="status"):
            parse_task(BUY_MILK.replace("status: ready", "status: someday"))

    def test_bad_date(self) -> None:
        with pytest.raises(InvalidFieldError, match="due"):
            parse_task(BUY_MILK.replace("due: 2025-01-15", "due: next week"))

    def test_list_title_is_invalid(self) -> None:
        with pytest.raises(InvalidFieldError, match="title"):
            parse_task(BUY_MILK.replace("title: Buy milk", "title: [a, b]"))

    def test_numeric_title_is_text(self) -> None:
        assert parse_task(BUY_MILK.replace("title: Buy milk", "title: 42")).title == "42"

    @pytest.mark.parametrize("spelling", ["007", "1.10", "0o17", "1_000", "1e3", "True"])
    def test_scalar_title_keeps_source_text(self, spelling: str) -> None:
        task = parse_task(BUY_MILK.replace("title: Buy milk", f"title: {spelling}"))
        assert task.title == spelling

    def test_no_frontmatter(self) -> None:
        with pytest.raises(ParseError):
            parse_task("Buy milk\n")


class TestParseProject:
    def test_fields(self) -> None:
        project = parse_project(
            "---\n"
            "title: Q1 Launch\n"
            "unique-id: P-1\n"
            "status: in-progress\n"
            "description: Ship the thing\n"
            'area: "[[Work]]"\n'
            "start-date: 2025-01-01\n"
            "end-date: 2025-03-31\n"
            "blocked-by:\n"
            '  - "[[Budget]]"\n'
            "  - hiring.md\n"
            "taskdn-type: project\n"
            "---\n"
        )
        assert project.title == "Q1 Launch"
        assert project.unique_id == "P-1"
        assert project.status is ProjectStatus.IN_PROGRESS
        assert project.area == WikiLink("Work")
        assert project.start_date == date(2025, 1, 1)
        assert project.end_date == date(2025, 3, 31)
        assert project.blocked_by == [WikiLink("Budget"), Filename("hiring.md")]
        assert project.extra == {"taskdn-type": "project"}

    def test_only_title_required(self) -> None:
        project = parse_project("---\ntitle: Bare\n---\n")
        assert project.status is None
        assert project.blocked_by == []

    def test_single_blocked_by(self) -> None:
        project = parse_project('---\ntitle: X\nblocked-by: "[[Y]]"\n---\n')
        assert project.blocked_by == [WikiLink("Y")]

    def test_missing_title(self) -> None:
        with pytest.raises(MissingFieldError):
            parse_project("---\nstatus: ready\n---\n")


class TestParseArea:
    def test_fields(self) -> None:
        area = parse_area("---\ntitle: Work\nstatus: active\ntype: job\n---\nNotes\n")
        assert area.status is AreaStatus.ACTIVE
        assert area.area_type == "job"
        assert area.body == "Notes\n"
        assert area.is_active

    def test_missing_status_is_active(self) -> None:
        assert parse_area("---\ntitle: Home\n---\n").is_active

    def test_archived(self) -> None:
        assert not parse_area("---\ntitle: Old\nstatus: archived\n---\n").is_active

    def test_numeric_type_and_description_are_text(self) -> None:
        area = parse_area("---\ntitle: Lab\ntype: 2024\ndescription: 1.10\n---\n")
        assert area.area_type == "2024"
        assert area.description == "1.10"
