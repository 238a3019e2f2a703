from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Collection, Dict, Iterable, Optional

import structlog

from pacer.dates import coerce_date
from pacer.progress import round_half_up

logger = structlog.get_logger()


@dataclass(frozen=True)
class YearlyStatistics:
    total_amount: int
    study_days: int
    max_day: int
    avg_per_day: int


def aggregate_yearly(
    year: int,
    logs: Iterable,
    textbook_ids: Optional[Collection[int]] = None,
) -> Dict[date, int]:
    """
    Sum logged problems per calendar day of `year`, across all textbooks.

    The result is sparse: days with nothing logged are left out, and keys are
    in ascending date order. Logs with unreadable dates are skipped.

    Args:
        year: Calendar year to roll up
        logs: Study logs (anything with .date, .actual_amount and .textbook_id)
        textbook_ids: Only count logs for these textbooks, when given
    """
    first_day = date(year, 1, 1)
    last_day = date(year, 12, 31)
    totals: Dict[date, int] = defaultdict(int)

    for log in logs:
        day = coerce_date(log.date)
        if day is None:
            logger.warning("yearly_log_skipped", log_id=getattr(log, "id", None), raw_date=str(log.date))
            continue
        if not first_day <= day <= last_day:
            continue
        if textbook_ids is not None and log.textbook_id not in textbook_ids:
            continue
        totals[day] += log.actual_amount or 0

    return {day: totals[day] for day in sorted(totals)}


def yearly_statistics(days: Dict[date, int]) -> YearlyStatistics:
    """Totals for a yearly roll-up, for the heat-map legend"""
    total_amount = sum(days.values())
    study_days = len(days)
    return YearlyStatistics(
        total_amount=total_amount,
        study_days=study_days,
        max_day=max(days.values(), default=0),
        avg_per_day=round_half_up(total_amount / study_days) if study_days else 0,
    )
