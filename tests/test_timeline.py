from datetime import date
from types import SimpleNamespace

from structlog.testing import capture_logs

from pacer.timeline import TimelineKind, merge_timeline


def make_plan(plan_id, start, end, title="Blue Chart", subject="Math"):
    return SimpleNamespace(
        id=plan_id, start_date=start, end_date=end,
        textbook_title=title, textbook_subject=subject,
    )


def make_exam(exam_id, day, name, is_mock=False, university_name=None):
    return SimpleNamespace(id=exam_id, date=day, name=name, is_mock=is_mock, university_name=university_name)


def test_plan_and_exam_in_date_order():
    plan = make_plan(1, date(2024, 4, 1), date(2024, 5, 5))
    exam = make_exam(7, date(2024, 6, 1), "Second Stage", university_name="Todai")

    events = merge_timeline([plan], [exam], date(2024, 1, 1), date(2024, 12, 31))

    assert [e.id for e in events] == ["plan-1", "exam-7"]
    assert events[0].kind == TimelineKind.PLAN
    assert events[0].title == "Math: Blue Chart"
    assert events[0].end_date == date(2024, 5, 5)
    assert events[1].title == "Todai Second Stage"
    assert events[1].start_date == events[1].end_date == date(2024, 6, 1)
    assert events[1].details is exam


def test_exams_before_plans_when_earlier():
    plan = make_plan(1, date(2024, 4, 1), date(2024, 5, 5))
    exam = make_exam(2, date(2024, 2, 1), "Mock A", is_mock=True)

    events = merge_timeline([plan], [exam])

    assert [e.id for e in events] == ["mock_exam-2", "plan-1"]


def test_mock_exam_title_ignores_university():
    exam = make_exam(3, date(2024, 6, 1), "Summer Mock", is_mock=True, university_name="Todai")
    event = merge_timeline([], [exam])[0]

    assert event.kind == TimelineKind.MOCK_EXAM
    assert event.id == "mock_exam-3"
    assert event.title == "Summer Mock"


def test_exam_without_university_uses_its_name():
    event = merge_timeline([], [make_exam(4, date(2024, 6, 1), "Common Test")])[0]
    assert event.title == "Common Test"


def test_plan_title_placeholders():
    plan = make_plan(5, date(2024, 4, 1), date(2024, 4, 30), title=None, subject=None)
    assert merge_timeline([plan], [])[0].title == "N/A: N/A"


def test_equal_keys_keep_input_order():
    plan = make_plan(1, date(2024, 5, 1), date(2024, 5, 1))
    first = make_exam(10, date(2024, 5, 1), "First")
    second = make_exam(9, date(2024, 5, 1), "Second")

    events = merge_timeline([plan], [first, second])

    assert [e.id for e in events] == ["plan-1", "exam-10", "exam-9"]


def test_same_start_sorted_by_end():
    long_plan = make_plan(1, date(2024, 4, 1), date(2024, 6, 30))
    short_plan = make_plan(2, date(2024, 4, 1), date(2024, 4, 30))

    events = merge_timeline([long_plan, short_plan], [])

    assert [e.id for e in events] == ["plan-2", "plan-1"]


def test_range_keeps_overlapping_plans_only():
    overlapping = make_plan(1, date(2023, 12, 1), date(2024, 1, 15))
    before = make_plan(2, date(2023, 10, 1), date(2023, 11, 30))
    inside = make_exam(3, date(2024, 3, 1), "Inside")
    after = make_exam(4, date(2025, 1, 2), "After")

    events = merge_timeline([overlapping, before], [inside, after], date(2024, 1, 1), date(2024, 12, 31))

    assert [e.id for e in events] == ["plan-1", "exam-3"]


def test_string_dates_are_read_as_calendar_days():
    exam = make_exam(6, "2024-06-01T00:00:00Z", "Common Test")
    assert merge_timeline([], [exam])[0].start_date == date(2024, 6, 1)


def test_unreadable_records_are_skipped():
    good = make_exam(1, date(2024, 6, 1), "Good")
    bad_exam = make_exam(2, "not-a-date", "Bad")
    bad_plan = make_plan(3, None, date(2024, 5, 5))

    with capture_logs() as logs:
        events = merge_timeline([bad_plan], [bad_exam, good])

    assert [e.id for e in events] == ["exam-1"]
    skipped = [entry for entry in logs if entry["event"] == "timeline_record_skipped"]
    assert len(skipped) == 2
    assert all(entry["log_level"] == "warning" for entry in skipped)


def test_empty_inputs():
    assert merge_timeline([], []) == []
