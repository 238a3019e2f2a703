from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional

from pacer.plan_compiler import resolve_target


@dataclass(frozen=True)
class TodaysTask:
    plan_id: int
    textbook_id: int
    title: str
    subject: str
    target: int
    review_deck: Optional[str] = None  # None: no deck linked, review can't be started


def resolve_todays_tasks(plans: Iterable, today: Optional[date] = None) -> List[TodaysTask]:
    """
    One task per plan whose window contains `today`.

    The target is the plan's weekday goal for today when it has one, else its
    flat daily goal. Plans without a linked review deck are still listed.
    """
    today = today or date.today()
    tasks = []
    for plan in plans:
        if not plan.start_date <= today <= plan.end_date:
            continue
        tasks.append(TodaysTask(
            plan_id=plan.id,
            textbook_id=plan.textbook_id,
            title=plan.textbook_title or "",
            subject=plan.textbook_subject or "",
            target=resolve_target(plan.weekday_goals, plan.daily_goal, today),
            review_deck=plan.anki_deck_name,
        ))
    return tasks
