import json
import logging
from datetime import date

import pytest

from ingestion.errors import ExtractionError
from ingestion.extraction import (
    coerce_plan,
    coerce_schedule,
    coerce_syllabus,
    extract_json,
    total_estimated_minutes,
)
from ingestion.schemas import AssignmentDraft, Topic

SYLLABUS = {
    "schedule": {
        "days": ["Monday", "Wednesday"],
        "startTime": "10:00",
        "endTime": "11:15",
        "startDate": "2025-01-13",
        "endDate": "2025-05-09",
    },
    "topics": [
        {"title": "Week 1: Limits", "description": "Intro", "orderIndex": 1, "estimatedMinutes": 90},
        {"title": "Week 2: Derivatives"},
    ],
    "assignments": [
        {"title": "Problem Set 1", "dueDate": "2025-02-01", "type": "hw", "estimatedMinutes": 120},
        {"title": "Midterm", "type": "exam"},
    ],
}


def test_extract_fenced_json():
    text = "Here you go:\n```json\n" + json.dumps(SYLLABUS) + "\n```\nGood luck!"
    assert extract_json(text) == SYLLABUS


def test_extract_bare_object_with_prose():
    text = "Sure! " + json.dumps(SYLLABUS) + " Let me know."
    assert extract_json(text)["topics"][1]["title"] == "Week 2: Derivatives"


def test_extract_array():
    plan = [{"blockDate": "2025-02-10", "assignmentIndex": 0}]
    assert extract_json("Plan: " + json.dumps(plan), expect=list) == plan


@pytest.mark.parametrize("text", ["no json here", "{broken", "[1, 2]", None])
def test_extract_rejects_unusable_text(text):
    with pytest.raises(ExtractionError):
        extract_json(text)


def test_coerce_syllabus_applies_defaults():
    parsed = coerce_syllabus(SYLLABUS)

    assert parsed.schedule.days == ("Monday", "Wednesday")
    assert parsed.schedule.start_date == date(2025, 1, 13)
    assert parsed.schedule.end_date == date(2025, 5, 9)

    second_topic = parsed.topics[1]
    assert second_topic.description == ""
    assert second_topic.order_index == 0
    assert second_topic.estimated_minutes == 60

    midterm = parsed.assignments[1]
    assert midterm.type == "exam"
    assert midterm.due_date is None
    assert midterm.estimated_minutes == 60
    assert parsed.total_minutes == 90 + 60 + 120 + 60


def test_coerce_syllabus_without_schedule():
    parsed = coerce_syllabus({"schedule": None, "topics": "oops", "assignments": [1, {"title": "Read ch. 1"}]})

    assert parsed.schedule is None
    assert parsed.topics == []
    assert [a.title for a in parsed.assignments] == ["Read ch. 1"]
    assert parsed.assignments[0].type == "reading"


@pytest.mark.parametrize("raw", [
    "MWF 10-11",
    {"days": [], "startTime": "10:00", "endTime": "11:00"},
    {"days": ["Monday"], "endTime": "11:00"},
    {"days": ["Monday"], "startTime": "10:00", "endTime": 11},
    {"days": ["Monday"], "startTime": "10:00", "endTime": "11:00", "startDate": "spring"},
])
def test_unusable_schedule_is_none(raw):
    assert coerce_schedule(raw) is None


def test_schedule_days_as_string_are_split():
    schedule = coerce_schedule({"days": "Tuesday, Thursday", "startTime": "14:00", "endTime": "15:30"})

    assert schedule.days == ("Tuesday", "Thursday")
    assert schedule.start_date is None


def test_assignment_to_planner_payload_keeps_order():
    parsed = coerce_syllabus(SYLLABUS)

    payload = [a.to_planner_payload() for a in parsed.assignments]

    assert payload[0] == {
        "title": "Problem Set 1",
        "type": "hw",
        "dueDate": "2025-02-01",
        "estimatedMinutes": 120,
    }
    assert parsed.assignments[0].to_row("cls")["class_id"] == "cls"


def test_coerce_plan_requires_list():
    assert coerce_plan({"blocks": []}) == []
    assert coerce_plan([{"blockDate": "2025-02-10"}]) == [{"blockDate": "2025-02-10"}]


def test_total_estimated_minutes_empty():
    assert total_estimated_minutes([], []) == 0


def test_topic_fields_fall_back_to_defaults():
    topic = Topic.model_validate({
        "title": "  Week 3  ",
        "description": None,
        "orderIndex": "3",
        "estimatedMinutes": -20,
    })

    assert topic.title == "Week 3"
    assert topic.description == ""
    assert topic.order_index == 0
    assert topic.estimated_minutes == 60
    assert topic.to_row("cls") == {
        "class_id": "cls",
        "title": "Week 3",
        "description": "",
        "order_index": 0,
        "estimated_minutes": 60,
    }


@pytest.mark.parametrize("minutes,expected", [(45.6, 46), ("90", 90), (True, 60), ("a lot", 60), (0, 60)])
def test_assignment_estimates(minutes, expected):
    assert AssignmentDraft.model_validate({"title": "Lab", "estimatedMinutes": minutes}).estimated_minutes == expected


def test_assignment_due_date_and_type_are_normalised(caplog):
    with caplog.at_level(logging.WARNING):
        draft = AssignmentDraft.model_validate({"title": "Quiz", "type": " EXAM ", "dueDate": "week 5"})

    assert draft.type == "exam"
    assert draft.due_date is None
    assert "unparseable due date" in caplog.text
    assert AssignmentDraft.model_validate({"dueDate": "2025-03-01T23:59:00Z"}).due_date == "2025-03-01"


def test_malformed_entries_are_dropped_one_by_one():
    parsed = coerce_syllabus({
        "topics": [{"title": "A"}, "B", None, {"title": "C"}],
        "assignments": [["hw"], {"title": "PS"}],
    })

    assert [t.title for t in parsed.topics] == ["A", "C"]
    assert [a.title for a in parsed.assignments] == ["PS"]


def test_schedule_schema_drops_non_string_days():
    schedule = coerce_schedule({"days": ["Monday", 3, None], "startTime": " 10:00 ", "endTime": "11:00", "endDate": ""})

    assert schedule.days == ("Monday",)
    assert schedule.start_time == "10:00"
    assert schedule.end_date is None
