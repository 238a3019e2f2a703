from sqlalchemy import String, type_coerce
from sqlalchemy.orm import Session
from pacer.models import StudyLog
from pacer.schemas import StudyLogCreate
from typing import Iterable, List, Optional
from datetime import date

def create_study_log(db: Session, log: StudyLogCreate) -> StudyLog:
    """Record a day's work"""
    db_log = StudyLog(**log.model_dump())
    db.add(db_log)
    db.commit()
    db.refresh(db_log)
    return db_log

def get_study_log(db: Session, log_id: int) -> Optional[StudyLog]:
    """Get study log by ID"""
    return db.query(StudyLog).filter(StudyLog.id == log_id).first()

def find_study_log(db: Session, textbook_id: int, log_date: date) -> Optional[StudyLog]:
    """The log for a (date, textbook) pair, if one was recorded"""
    return db.query(StudyLog).filter(
        StudyLog.textbook_id == textbook_id,
        StudyLog.date == log_date
    ).order_by(StudyLog.id).first()

def upsert_study_log(db: Session, log: StudyLogCreate) -> StudyLog:
    """Create the (date, textbook) log or overwrite the existing one"""
    db_log = find_study_log(db, log.textbook_id, log.date)
    if not db_log:
        return create_study_log(db, log)
    for key, value in log.model_dump().items():
        setattr(db_log, key, value)
    db.commit()
    db.refresh(db_log)
    return db_log

def list_study_logs(
    db: Session,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    textbook_id: Optional[int] = None
) -> List[StudyLog]:
    """Logs filtered by date range and textbook, newest first"""
    query = db.query(StudyLog)
    if start_date:
        query = query.filter(StudyLog.date >= start_date)
    if end_date:
        query = query.filter(StudyLog.date <= end_date)
    if textbook_id:
        query = query.filter(StudyLog.textbook_id == textbook_id)
    return query.order_by(StudyLog.date.desc(), StudyLog.id.desc()).all()

def get_logs_for_textbook(db: Session, textbook_id: int) -> List[StudyLog]:
    """Every log ever recorded for a textbook, oldest first"""
    return db.query(StudyLog).filter(
        StudyLog.textbook_id == textbook_id
    ).order_by(StudyLog.date, StudyLog.id).all()

def get_logs_for_year(db: Session, year: int, textbook_ids: Optional[Iterable[int]] = None) -> list:
    """
    Logs dated within the calendar year, optionally for some textbooks only.

    Rows carry id, date, textbook_id and actual_amount. The date is returned
    as stored (unparsed) so a corrupt row can be skipped by the roll-up.
    """
    query = db.query(
        StudyLog.id,
        type_coerce(StudyLog.date, String).label("date"),
        StudyLog.textbook_id,
        StudyLog.actual_amount
    ).filter(
        StudyLog.date >= date(year, 1, 1),
        StudyLog.date <= date(year, 12, 31)
    )
    if textbook_ids is not None:
        query = query.filter(StudyLog.textbook_id.in_(list(textbook_ids)))
    return query.order_by(StudyLog.date, StudyLog.id).all()

def delete_study_log(db: Session, log_id: int) -> bool:
    """Delete a study log"""
    db_log = get_study_log(db, log_id)
    if not db_log:
        return False
    db.delete(db_log)
    db.commit()
    return True
