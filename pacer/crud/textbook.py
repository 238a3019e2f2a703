from sqlalchemy.orm import Session
from pacer.models import Textbook
from pacer.schemas import TextbookCreate
from typing import List, Optional

def create_textbook(db: Session, textbook: TextbookCreate) -> Textbook:
    """Create a textbook"""
    db_textbook = Textbook(**textbook.model_dump())
    db.add(db_textbook)
    db.commit()
    db.refresh(db_textbook)
    return db_textbook

def get_textbook(db: Session, textbook_id: int) -> Optional[Textbook]:
    """Get textbook by ID"""
    return db.query(Textbook).filter(Textbook.id == textbook_id).first()

def list_textbooks(db: Session, subject: Optional[str] = None) -> List[Textbook]:
    """All textbooks ordered by subject and title"""
    query = db.query(Textbook)
    if subject:
        query = query.filter(Textbook.subject == subject)
    return query.order_by(Textbook.subject, Textbook.title).all()

def list_subjects(db: Session) -> List[str]:
    """Distinct textbook subjects"""
    rows = db.query(Textbook.subject).distinct().order_by(Textbook.subject).all()
    return [row[0] for row in rows]

def update_textbook(db: Session, textbook_id: int, textbook_data: dict) -> Optional[Textbook]:
    """Update textbook fields"""
    db_textbook = get_textbook(db, textbook_id)
    if db_textbook:
        for key, value in textbook_data.items():
            setattr(db_textbook, key, value)
        db.commit()
        db.refresh(db_textbook)
    return db_textbook

def link_anki_deck(db: Session, textbook_id: int, deck_name: Optional[str]) -> Optional[Textbook]:
    """Associate a review deck name with a textbook (None unlinks)"""
    return update_textbook(db, textbook_id, {"anki_deck_name": deck_name})

def delete_textbook(db: Session, textbook_id: int) -> bool:
    """Delete a textbook together with its plans and logs"""
    db_textbook = get_textbook(db, textbook_id)
    if not db_textbook:
        return False
    db.delete(db_textbook)
    db.commit()
    return True
