from sqlalchemy.orm import Session
from pacer.models import University
from pacer.schemas import UniversityCreate
from typing import List, Optional

def create_university(db: Session, university: UniversityCreate) -> University:
    """Create a university"""
    db_university = University(**university.model_dump())
    db.add(db_university)
    db.commit()
    db.refresh(db_university)
    return db_university

def get_university(db: Session, university_id: int) -> Optional[University]:
    """Get university by ID"""
    return db.query(University).filter(University.id == university_id).first()

def list_universities(db: Session) -> List[University]:
    """All universities, first choice first"""
    return db.query(University).order_by(University.rank, University.name).all()

def update_university(db: Session, university_id: int, university: UniversityCreate) -> Optional[University]:
    """Replace a university's fields"""
    db_university = get_university(db, university_id)
    if db_university:
        for key, value in university.model_dump().items():
            setattr(db_university, key, value)
        db.commit()
        db.refresh(db_university)
    return db_university

def delete_university(db: Session, university_id: int) -> bool:
    """Delete a university; its exams keep existing without one"""
    db_university = get_university(db, university_id)
    if not db_university:
        return False
    for exam in db_university.exams:
        exam.university_id = None
    db.delete(db_university)
    db.commit()
    return True
