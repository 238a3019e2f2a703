from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Iterable, List, Optional

import structlog

from pacer.dates import coerce_date

logger = structlog.get_logger()


class TimelineKind(str, Enum):
    PLAN = "plan"
    EXAM = "exam"
    MOCK_EXAM = "mock_exam"


@dataclass(frozen=True)
class TimelineEvent:
    """A plan window or an exam day on the combined timeline"""
    kind: TimelineKind
    id: str
    title: str
    start_date: date
    end_date: Optional[date]
    details: Any  # the originating plan or exam record

    @property
    def sort_key(self):
        return (self.start_date, self.end_date or self.start_date)


def _plan_title(plan) -> str:
    subject = getattr(plan, "textbook_subject", None) or "N/A"
    title = getattr(plan, "textbook_title", None) or "N/A"
    return f"{subject}: {title}"


def _exam_title(exam) -> str:
    if exam.is_mock:
        return exam.name
    university_name = getattr(exam, "university_name", None)
    return f"{university_name} {exam.name}" if university_name else exam.name


def plan_event(plan) -> Optional[TimelineEvent]:
    """Timeline event for a study plan, or None if its dates are unreadable"""
    start = coerce_date(plan.start_date)
    end = coerce_date(plan.end_date)
    if start is None or end is None:
        logger.warning("timeline_record_skipped", kind="plan", source_id=getattr(plan, "id", None))
        return None
    return TimelineEvent(
        kind=TimelineKind.PLAN,
        id=f"{TimelineKind.PLAN.value}-{plan.id}",
        title=_plan_title(plan),
        start_date=start,
        end_date=end,
        details=plan,
    )


def exam_event(exam) -> Optional[TimelineEvent]:
    """Timeline event for a real or mock exam, or None if its date is unreadable"""
    day = coerce_date(exam.date)
    if day is None:
        logger.warning("timeline_record_skipped", kind="exam", source_id=getattr(exam, "id", None))
        return None
    kind = TimelineKind.MOCK_EXAM if exam.is_mock else TimelineKind.EXAM
    return TimelineEvent(
        kind=kind,
        id=f"{kind.value}-{exam.id}",
        title=_exam_title(exam),
        start_date=day,
        end_date=day,
        details=exam,
    )


def _in_range(start: date, end: date, range_start: Optional[date], range_end: Optional[date]) -> bool:
    if range_start is not None and end < range_start:
        return False
    if range_end is not None and start > range_end:
        return False
    return True


def merge_timeline(
    plans: Iterable,
    exams: Iterable,
    range_start: Optional[date] = None,
    range_end: Optional[date] = None,
) -> List[TimelineEvent]:
    """
    Merge plan windows and exam days into one chronological list.

    A plan is kept when its window overlaps [range_start, range_end]; an exam
    when its date falls inside it. Either bound may be omitted. Records with
    unreadable dates are skipped rather than failing the whole timeline.

    Events are ordered by start date, then end date (an event without an end
    date ends on its start date). The sort is stable, so events with equal
    keys keep their input order: plans before exams, each in the order given.
    """
    events: List[TimelineEvent] = []

    for plan in plans:
        event = plan_event(plan)
        if event and _in_range(event.start_date, event.end_date, range_start, range_end):
            events.append(event)

    for exam in exams:
        event = exam_event(exam)
        if event and _in_range(event.start_date, event.end_date, range_start, range_end):
            events.append(event)

    events.sort(key=lambda e: e.sort_key)
    return events
