"""
Operations over the study database.

Each operation reads the records it needs through pacer.crud, hands them to
one of the pure components (plan compiler, progress, timeline, yearly
roll-up, today's tasks) and returns the computed value. Persistence failures
surface as DependencyError; missing records as NotFoundError.

compile_plan is importable from here too, for previews that save nothing.
"""
from contextlib import contextmanager
from datetime import date
from typing import Dict, List, Mapping, Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pacer import crud
from pacer.errors import DependencyError, InvalidInputError, NotFoundError
from pacer.plan_compiler import CompiledPlan, compile_plan, plan_window
from pacer.progress import ProgressSnapshot, aggregate_progress
from pacer.schemas import (
    StudyLogCreate,
    StudyLogRead,
    StudyPlanCreate,
    StudyPlanRead,
    SubjectScoreInput,
    SubjectScoreRead,
)
from pacer.timeline import TimelineEvent, merge_timeline
from pacer.todays_tasks import TodaysTask, resolve_todays_tasks
from pacer.weekday_goals import serialize_weekday_goals
from pacer.yearly import aggregate_yearly

logger = structlog.get_logger()


@contextmanager
def _persistence(operation: str):
    """Turn database failures into DependencyError"""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("persistence_failed", operation=operation, error=str(e))
        raise DependencyError(f"{operation} failed: {e}") from e


def _require_textbook(db: Session, textbook_id: int):
    textbook = crud.get_textbook(db, textbook_id)
    if not textbook:
        raise NotFoundError("Textbook", textbook_id)
    return textbook


# ===================================================================
# PLANNING
# ===================================================================

def _compile_for_textbook(
    textbook,
    start_date: date,
    weekday_goals: Mapping,
    buffer_days: int,
    total_problems: Optional[int],
) -> CompiledPlan:
    total = total_problems if total_problems is not None else textbook.total_problems
    return compile_plan(start_date, weekday_goals, buffer_days, total)


def _plan_fields(
    textbook_id: int,
    compiled: CompiledPlan,
    total_problems: Optional[int],
    daily_goal: Optional[int],
) -> StudyPlanCreate:
    # Monday's goal stands in as the flat daily goal unless one is given
    if daily_goal is None:
        daily_goal = compiled.weekday_goals[1]
    return StudyPlanCreate(
        textbook_id=textbook_id,
        start_date=compiled.start_date,
        end_date=compiled.end_date,
        daily_goal=daily_goal,
        buffer_days=compiled.buffer_days,
        weekday_goals=serialize_weekday_goals(compiled.weekday_goals),
        total_problems=total_problems,
    )


def plan_study(
    db: Session,
    textbook_id: int,
    start_date: date,
    weekday_goals: Mapping,
    buffer_days: int = 0,
    total_problems: Optional[int] = None,
    daily_goal: Optional[int] = None,
) -> StudyPlanRead:
    """
    Compile a plan for a textbook and save it.

    total_problems defaults to the textbook's total. A textbook can only have
    one plan; use replan_study to change it.
    """
    with _persistence("plan_study"):
        textbook = _require_textbook(db, textbook_id)
        if crud.get_plan_for_textbook(db, textbook_id):
            raise InvalidInputError(f"Textbook {textbook_id} already has a study plan")

        compiled = _compile_for_textbook(textbook, start_date, weekday_goals, buffer_days, total_problems)
        db_plan = crud.create_study_plan(db, _plan_fields(textbook_id, compiled, total_problems, daily_goal))

        logger.info(
            "plan_created",
            plan_id=db_plan.id,
            textbook_id=textbook_id,
            start_date=compiled.start_date.isoformat(),
            end_date=compiled.end_date.isoformat(),
            weeks_needed=compiled.weeks_needed,
        )
        return StudyPlanRead.model_validate(db_plan)


def replan_study(
    db: Session,
    plan_id: int,
    start_date: Optional[date] = None,
    weekday_goals: Optional[Mapping] = None,
    buffer_days: Optional[int] = None,
    total_problems: Optional[int] = None,
    daily_goal: Optional[int] = None,
) -> StudyPlanRead:
    """
    Recompile a plan and replace it wholesale.

    Any argument left as None keeps the current plan's value. A stored plan
    without a readable weekday map needs weekday_goals passed explicitly.
    """
    with _persistence("replan_study"):
        db_plan = crud.get_study_plan(db, plan_id)
        if not db_plan:
            raise NotFoundError("Study plan", plan_id)
        current = StudyPlanRead.model_validate(db_plan)

        goals = weekday_goals if weekday_goals is not None else current.weekday_goals
        if goals is None:
            raise InvalidInputError(f"Plan {plan_id} has no weekday goals; pass them explicitly")
        total = total_problems if total_problems is not None else current.total_problems

        compiled = _compile_for_textbook(
            db_plan.textbook,
            start_date or current.start_date,
            goals,
            buffer_days if buffer_days is not None else current.buffer_days,
            total,
        )
        fields = _plan_fields(
            current.textbook_id,
            compiled,
            total,
            daily_goal if daily_goal is not None else current.daily_goal,
        )
        db_plan = crud.replace_study_plan(db, plan_id, fields)

        logger.info("plan_replaced", plan_id=plan_id, end_date=compiled.end_date.isoformat())
        return StudyPlanRead.model_validate(db_plan)


def delete_plan(db: Session, plan_id: int) -> None:
    """Delete a plan; its textbook's logs are kept"""
    with _persistence("delete_plan"):
        if not crud.delete_study_plan(db, plan_id):
            raise NotFoundError("Study plan", plan_id)
    logger.info("plan_deleted", plan_id=plan_id)


# ===================================================================
# LOGGING WORK
# ===================================================================

def record_daily_work(
    db: Session,
    textbook_id: int,
    log_date: date,
    actual_amount: int,
    planned_amount: Optional[int] = None,
    notes: Optional[str] = None,
) -> StudyLogRead:
    """
    Record (or overwrite) the problems solved for a textbook on one day.

    planned_amount defaults to the plan's target for that day, or 0 without
    a plan.
    """
    if actual_amount < 0:
        raise InvalidInputError(f"actual_amount must be >= 0, got {actual_amount}")

    with _persistence("record_daily_work"):
        _require_textbook(db, textbook_id)
        if planned_amount is None:
            db_plan = crud.get_plan_for_textbook(db, textbook_id)
            planned_amount = 0
            if db_plan:
                plan = StudyPlanRead.model_validate(db_plan)
                if plan.start_date <= plan.end_date:
                    planned_amount = plan_window(plan).target_for(log_date)

        db_log = crud.upsert_study_log(db, StudyLogCreate(
            date=log_date,
            textbook_id=textbook_id,
            planned_amount=planned_amount,
            actual_amount=actual_amount,
            notes=notes,
        ))
        logger.info(
            "work_recorded",
            textbook_id=textbook_id,
            date=log_date.isoformat(),
            planned_amount=planned_amount,
            actual_amount=actual_amount,
        )
        return StudyLogRead.model_validate(db_log)


# ===================================================================
# PROGRESS
# ===================================================================

def get_progress(db: Session, textbook_id: int, today: Optional[date] = None) -> ProgressSnapshot:
    """
    Progress of a textbook against its plan.

    Raises:
        NotFoundError: the textbook does not exist or has no plan
        InvalidPlanError: the stored plan is malformed
    """
    with _persistence("get_progress"):
        _require_textbook(db, textbook_id)
        db_plan = crud.get_plan_for_textbook(db, textbook_id)
        if not db_plan:
            raise NotFoundError("Study plan for textbook", textbook_id)
        plan = StudyPlanRead.model_validate(db_plan)
        logs = crud.get_logs_for_textbook(db, textbook_id)

    return aggregate_progress(plan_window(plan), logs, today)


def get_all_progress(db: Session, today: Optional[date] = None) -> Dict[int, Optional[ProgressSnapshot]]:
    """Progress for every textbook; None where a textbook has no plan yet"""
    with _persistence("get_all_progress"):
        textbooks = crud.list_textbooks(db)
        inputs = {}
        for textbook in textbooks:
            db_plan = crud.get_plan_for_textbook(db, textbook.id)
            if db_plan:
                inputs[textbook.id] = (
                    StudyPlanRead.model_validate(db_plan),
                    crud.get_logs_for_textbook(db, textbook.id),
                )
            else:
                inputs[textbook.id] = None

    return {
        textbook_id: aggregate_progress(plan_window(entry[0]), entry[1], today) if entry else None
        for textbook_id, entry in inputs.items()
    }


# ===================================================================
# TIMELINE / YEARLY / TODAY
# ===================================================================

def get_timeline(
    db: Session,
    range_start: Optional[date] = None,
    range_end: Optional[date] = None,
) -> List[TimelineEvent]:
    """
    Plans and exams in [range_start, range_end], in chronological order.

    Rows whose stored dates cannot be read are left out (and logged) rather
    than failing the whole timeline.
    """
    with _persistence("get_timeline"):
        plans = crud.list_plan_windows(db)
        exams = crud.list_exam_days(db)

    return merge_timeline(plans, exams, range_start, range_end)


def get_yearly_summary(
    db: Session,
    year: int,
    textbook_id: Optional[int] = None,
    subject: Optional[str] = None,
) -> Dict[date, int]:
    """
    Problems solved per day of `year` (days with nothing logged are absent).

    Narrow to one textbook with textbook_id, or to a subject's textbooks
    with subject; textbook_id wins when both are given.
    """
    with _persistence("get_yearly_summary"):
        textbook_ids = None
        if textbook_id is not None:
            textbook_ids = {textbook_id}
        elif subject:
            textbook_ids = {t.id for t in crud.list_textbooks(db, subject=subject)}
        logs = crud.get_logs_for_year(db, year, textbook_ids)

    return aggregate_yearly(year, logs, textbook_ids)


def get_todays_tasks(db: Session, today: Optional[date] = None) -> List[TodaysTask]:
    """What to solve today, one task per active plan"""
    today = today or date.today()
    with _persistence("get_todays_tasks"):
        plans = [StudyPlanRead.model_validate(p) for p in crud.get_active_plans(db, today)]

    return resolve_todays_tasks(plans, today)


# ===================================================================
# EXAM SCORES
# ===================================================================

def record_subject_scores(db: Session, exam_id: int, scores: List[SubjectScoreInput]) -> List[SubjectScoreRead]:
    """Upsert all subject scores of an exam; all rows are saved or none"""
    with _persistence("record_subject_scores"):
        if not crud.get_exam(db, exam_id):
            raise NotFoundError("Exam", exam_id)
        rows = crud.batch_upsert_subject_scores(db, exam_id, scores)
        logger.info("subject_scores_recorded", exam_id=exam_id, count=len(scores))
        return [SubjectScoreRead.model_validate(row) for row in rows]
