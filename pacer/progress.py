"""
Actual-vs-ideal progress for one study plan.

The ideal pace is linear: total_problems spread evenly over every day of the
plan window. Actual progress is everything ever logged for the textbook,
including logs from before the plan started or after it ended, so that
progress survives a plan being replaced.
"""
import math
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Dict, Iterable, List, Optional

import structlog

from pacer.errors import InvalidPlanError
from pacer.plan_compiler import PlanWindow

logger = structlog.get_logger()

# difference (actual - ideal) at or above which a plan counts as on track
ON_TRACK_MARGIN = 10
# difference below -BEHIND_MARGIN counts as behind
BEHIND_MARGIN = 10


class ProgressStatus(str, Enum):
    ON_TRACK = "on_track"
    NEAR_TARGET = "near_target"
    SLIGHTLY_BEHIND = "slightly_behind"
    BEHIND = "behind"


STATUS_LABELS = {
    ProgressStatus.ON_TRACK: "On track",
    ProgressStatus.NEAR_TARGET: "Near target",
    ProgressStatus.SLIGHTLY_BEHIND: "Slightly behind",
    ProgressStatus.BEHIND: "Behind",
}


@dataclass(frozen=True)
class ProgressPoint:
    """One day of the cumulative chart series"""
    date: date
    planned: int
    actual: int
    cumulative_actual: int
    cumulative_ideal: int


@dataclass(frozen=True)
class ProgressSnapshot:
    total_days: int
    elapsed_days: int
    remaining_days: int
    ideal_solved: int
    actual_solved: int
    difference: int
    status: ProgressStatus
    daily_target: int
    total_problems: int
    remaining_problems: int
    progress_percentage: int
    series: List[ProgressPoint] = field(default_factory=list)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (round() would round to even)"""
    return math.floor(value + 0.5)


def classify(difference: int) -> ProgressStatus:
    """Status for actual - ideal"""
    if difference >= ON_TRACK_MARGIN:
        return ProgressStatus.ON_TRACK
    if difference >= 0:
        return ProgressStatus.NEAR_TARGET
    if difference >= -BEHIND_MARGIN:
        return ProgressStatus.SLIGHTLY_BEHIND
    return ProgressStatus.BEHIND


def _amounts_by_day(logs: Iterable) -> Dict[date, int]:
    by_day: Dict[date, int] = defaultdict(int)
    for log in logs:
        by_day[log.date] += log.actual_amount or 0
    return by_day


def aggregate_progress(plan: PlanWindow, logs: Iterable, today: Optional[date] = None) -> ProgressSnapshot:
    """
    Compare logged work for a textbook against its plan's linear ideal pace.

    Args:
        plan: Plan window (start/end date, total problems, per-day targets)
        logs: All study logs for the plan's textbook (anything with .date and .actual_amount)
        today: Reference day, defaults to date.today()

    Returns:
        ProgressSnapshot including a per-day cumulative series up to
        min(end_date, today)

    Raises:
        InvalidPlanError: the plan ends before it starts, or has nothing to solve
    """
    if plan.start_date > plan.end_date:
        raise InvalidPlanError(f"Plan ends ({plan.end_date}) before it starts ({plan.start_date})")
    if plan.total_problems <= 0:
        raise InvalidPlanError(f"Plan has no problems to solve (total_problems={plan.total_problems})")

    today = today or date.today()
    total_problems = plan.total_problems

    total_days = max(1, (plan.end_date - plan.start_date).days + 1)
    elapsed_days = min(max((today - plan.start_date).days + 1, 0), total_days)
    remaining_days = total_days - elapsed_days

    daily_ideal_rate = total_problems / total_days
    ideal_solved = min(round_half_up(daily_ideal_rate * elapsed_days), total_problems)

    by_day = _amounts_by_day(logs)
    actual_solved = sum(by_day.values())
    difference = actual_solved - ideal_solved
    remaining_problems = max(0, total_problems - actual_solved)

    if remaining_days > 0:
        daily_target = math.ceil(remaining_problems / remaining_days)
    else:
        daily_target = remaining_problems

    series = []
    cumulative_actual = 0
    last_day = min(plan.end_date, today)
    for index in range(1, (last_day - plan.start_date).days + 2):
        day = plan.start_date + timedelta(days=index - 1)
        actual = by_day.get(day, 0)
        cumulative_actual += actual
        series.append(ProgressPoint(
            date=day,
            planned=plan.target_for(day),
            actual=actual,
            cumulative_actual=cumulative_actual,
            cumulative_ideal=min(round_half_up(daily_ideal_rate * index), total_problems),
        ))

    status = classify(difference)
    logger.debug(
        "progress_aggregated",
        elapsed_days=elapsed_days,
        total_days=total_days,
        ideal_solved=ideal_solved,
        actual_solved=actual_solved,
        status=status.value,
    )

    return ProgressSnapshot(
        total_days=total_days,
        elapsed_days=elapsed_days,
        remaining_days=remaining_days,
        ideal_solved=ideal_solved,
        actual_solved=actual_solved,
        difference=difference,
        status=status,
        daily_target=daily_target,
        total_problems=total_problems,
        remaining_problems=remaining_problems,
        progress_percentage=round_half_up(actual_solved / total_problems * 100),
        series=series,
    )
