from sqlalchemy import String, type_coerce
from sqlalchemy.orm import Session
from pacer.models import StudyPlan, Textbook
from pacer.schemas import StudyPlanCreate
from typing import List, Optional
from datetime import date

def create_study_plan(db: Session, plan: StudyPlanCreate) -> StudyPlan:
    """Save a study plan"""
    db_plan = StudyPlan(**plan.model_dump())
    db.add(db_plan)
    db.commit()
    db.refresh(db_plan)
    return db_plan

def get_study_plan(db: Session, plan_id: int) -> Optional[StudyPlan]:
    """Get study plan by ID"""
    return db.query(StudyPlan).filter(StudyPlan.id == plan_id).first()

def get_plan_for_textbook(db: Session, textbook_id: int) -> Optional[StudyPlan]:
    """The textbook's plan (there is at most one per textbook)"""
    return db.query(StudyPlan).filter(
        StudyPlan.textbook_id == textbook_id
    ).order_by(StudyPlan.id).first()

def list_study_plans(
    db: Session,
    range_start: Optional[date] = None,
    range_end: Optional[date] = None
) -> List[StudyPlan]:
    """Plans whose window overlaps [range_start, range_end], by start date"""
    query = db.query(StudyPlan)
    if range_start:
        query = query.filter(StudyPlan.end_date >= range_start)
    if range_end:
        query = query.filter(StudyPlan.start_date <= range_end)
    return query.order_by(StudyPlan.start_date, StudyPlan.id).all()

def get_active_plans(db: Session, day: date) -> List[StudyPlan]:
    """Plans whose window contains `day`"""
    return db.query(StudyPlan).filter(
        StudyPlan.start_date <= day,
        StudyPlan.end_date >= day
    ).order_by(StudyPlan.start_date, StudyPlan.id).all()

def replace_study_plan(db: Session, plan_id: int, plan: StudyPlanCreate) -> Optional[StudyPlan]:
    """Overwrite every field of a plan (there is no partial update)"""
    db_plan = get_study_plan(db, plan_id)
    if db_plan:
        for key, value in plan.model_dump().items():
            setattr(db_plan, key, value)
        db.commit()
        db.refresh(db_plan)
    return db_plan

def delete_study_plan(db: Session, plan_id: int) -> bool:
    """Delete a plan; logs and exams are independent and stay"""
    db_plan = get_study_plan(db, plan_id)
    if not db_plan:
        return False
    db.delete(db_plan)
    db.commit()
    return True

def list_plan_windows(db: Session) -> list:
    """
    Every plan's window with its textbook's names, for the timeline.

    Dates come back as stored (unparsed) so one corrupt row can be skipped
    by the caller instead of failing the whole fetch.
    """
    return db.query(
        StudyPlan.id,
        type_coerce(StudyPlan.start_date, String).label("start_date"),
        type_coerce(StudyPlan.end_date, String).label("end_date"),
        Textbook.title.label("textbook_title"),
        Textbook.subject.label("textbook_subject")
    ).outerjoin(Textbook, StudyPlan.textbook_id == Textbook.id).order_by(StudyPlan.id).all()
