from sqlalchemy import String, type_coerce
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from pacer.models import Exam, SubjectScore, University
from pacer.schemas import ExamCreate, SubjectScoreInput
from typing import List, Optional
from datetime import date

def create_exam(db: Session, exam: ExamCreate) -> Exam:
    """Create an exam"""
    db_exam = Exam(**exam.model_dump())
    db.add(db_exam)
    db.commit()
    db.refresh(db_exam)
    return db_exam

def get_exam(db: Session, exam_id: int) -> Optional[Exam]:
    """Get exam by ID"""
    return db.query(Exam).filter(Exam.id == exam_id).first()

def list_exams(
    db: Session,
    range_start: Optional[date] = None,
    range_end: Optional[date] = None,
    is_mock: Optional[bool] = None
) -> List[Exam]:
    """Exams dated within [range_start, range_end], by date"""
    query = db.query(Exam)
    if range_start:
        query = query.filter(Exam.date >= range_start)
    if range_end:
        query = query.filter(Exam.date <= range_end)
    if is_mock is not None:
        query = query.filter(Exam.is_mock == is_mock)
    return query.order_by(Exam.date, Exam.id).all()

def update_exam(db: Session, exam_id: int, exam: ExamCreate) -> Optional[Exam]:
    """Replace an exam's fields"""
    db_exam = get_exam(db, exam_id)
    if db_exam:
        for key, value in exam.model_dump().items():
            setattr(db_exam, key, value)
        db.commit()
        db.refresh(db_exam)
    return db_exam

def delete_exam(db: Session, exam_id: int) -> bool:
    """Delete an exam and its subject scores"""
    db_exam = get_exam(db, exam_id)
    if not db_exam:
        return False
    db.delete(db_exam)
    db.commit()
    return True

def get_subject_scores(db: Session, exam_id: int) -> List[SubjectScore]:
    """Subject scores of an exam"""
    return db.query(SubjectScore).filter(
        SubjectScore.exam_id == exam_id
    ).order_by(SubjectScore.exam_type, SubjectScore.subject).all()

def batch_upsert_subject_scores(db: Session, exam_id: int, scores: List[SubjectScoreInput]) -> List[SubjectScore]:
    """
    Upsert all subject scores of an exam in one transaction.

    Rows are matched on (exam_type, subject). Either every row is committed
    or, on failure, the session is rolled back and nothing is.
    """
    try:
        for item in scores:
            db_score = db.query(SubjectScore).filter(
                SubjectScore.exam_id == exam_id,
                SubjectScore.exam_type == item.exam_type,
                SubjectScore.subject == item.subject
            ).first()
            if db_score:
                db_score.score = item.score
                db_score.max_score = item.max_score
            else:
                db.add(SubjectScore(exam_id=exam_id, **item.model_dump()))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    return get_subject_scores(db, exam_id)

def list_exam_days(db: Session) -> list:
    """Every exam's day and university name, dates unparsed (see list_plan_windows)"""
    return db.query(
        Exam.id,
        Exam.name,
        type_coerce(Exam.date, String).label("date"),
        Exam.is_mock,
        University.name.label("university_name")
    ).outerjoin(University, Exam.university_id == University.id).order_by(Exam.id).all()
