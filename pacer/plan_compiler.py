import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, List, Mapping, Optional, Tuple

import structlog

from pacer.errors import InvalidInputError, InvalidPlanError
from pacer.weekday_goals import day_of_week, normalize_weekday_goals

logger = structlog.get_logger()


@dataclass(frozen=True)
class PlanWindow:
    """
    The part of a study plan the aggregators need: its inclusive date window,
    the number of problems to finish, and how to resolve a day's target.
    """
    start_date: date
    end_date: date
    total_problems: int
    weekday_goals: Optional[Dict[int, int]] = None
    daily_goal: Optional[int] = None

    @property
    def total_days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def target_for(self, day: date) -> int:
        """
        Problems planned for `day`.

        Uses the weekday goal when the plan has one for that weekday,
        otherwise the flat daily goal. Days outside the window have no target.
        """
        if not self.contains(day):
            return 0
        return resolve_target(self.weekday_goals, self.daily_goal, day)

    def daily_targets(self) -> List[Tuple[date, int]]:
        """(date, target) for every day in the window"""
        return [
            (self.start_date + timedelta(days=i), self.target_for(self.start_date + timedelta(days=i)))
            for i in range(max(0, self.total_days))
        ]


@dataclass(frozen=True)
class CompiledPlan(PlanWindow):
    """Result of compile_plan: the window plus how it was derived"""
    buffer_days: int = 0
    weekly_total: int = 0
    weeks_needed: int = 0


def resolve_target(weekday_goals: Optional[Mapping[int, int]], daily_goal: Optional[int], day: date) -> int:
    """Weekday goal for `day` if the map has an entry, else the daily goal (0 if unset)"""
    if weekday_goals is not None:
        goal = weekday_goals.get(day_of_week(day))
        if goal is not None:
            return goal
    return daily_goal or 0


def compile_plan(
    start_date: date,
    weekday_goals: Mapping,
    buffer_days: int,
    total_problems: int,
) -> CompiledPlan:
    """
    Work out when a textbook will be finished at a fixed weekly pace.

    The plan runs for as many whole weeks as the weekly goal total needs to
    cover `total_problems`, plus `buffer_days` of slack at the end. Weekdays
    with a goal of 0 are not renormalized; they simply lengthen the plan.

    Args:
        start_date: First day of the plan
        weekday_goals: Day-of-week (Sunday=0) -> problems to solve that day
        buffer_days: Extra days appended after the last full week (>= 0)
        total_problems: Problems to finish (> 0)

    Returns:
        CompiledPlan with the end date and per-day targets

    Raises:
        InvalidInputError: non-positive total, negative buffer, malformed goals
        InvalidPlanError: every weekday goal is zero
    """
    if total_problems is None or total_problems <= 0:
        raise InvalidInputError(f"total_problems must be positive, got {total_problems}")
    if buffer_days is None or buffer_days < 0:
        raise InvalidInputError(f"buffer_days must be >= 0, got {buffer_days}")

    goals = normalize_weekday_goals(weekday_goals)
    weekly_total = sum(goals.values())
    if weekly_total == 0:
        raise InvalidPlanError("Weekly goal total is zero; the plan would never finish")

    weeks_needed = math.ceil(total_problems / weekly_total)
    end_date = start_date + timedelta(days=weeks_needed * 7 - 1 + buffer_days)

    logger.debug(
        "plan_compiled",
        start_date=start_date.isoformat(),
        end_date=end_date.isoformat(),
        weekly_total=weekly_total,
        weeks_needed=weeks_needed,
        buffer_days=buffer_days,
    )

    return CompiledPlan(
        start_date=start_date,
        end_date=end_date,
        total_problems=total_problems,
        weekday_goals=goals,
        daily_goal=None,
        buffer_days=buffer_days,
        weekly_total=weekly_total,
        weeks_needed=weeks_needed,
    )


def plan_window(plan, textbook_total: Optional[int] = None) -> PlanWindow:
    """
    Build a PlanWindow from a stored plan record.

    The plan's own total_problems wins; otherwise the textbook's total is used.

    Raises:
        InvalidPlanError: end date before start date
    """
    if plan.end_date < plan.start_date:
        raise InvalidPlanError(
            f"Plan {getattr(plan, 'id', '?')} ends ({plan.end_date}) before it starts ({plan.start_date})"
        )
    if textbook_total is None:
        textbook_total = getattr(plan, "textbook_total_problems", None)
    total = plan.total_problems if plan.total_problems is not None else textbook_total
    return PlanWindow(
        start_date=plan.start_date,
        end_date=plan.end_date,
        total_problems=total or 0,
        weekday_goals=plan.weekday_goals,
        daily_goal=plan.daily_goal,
    )
