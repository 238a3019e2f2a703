from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
from pacer.database import Base

class Textbook(Base):
    """A fixed-size body of practice problems"""
    __tablename__ = "textbooks"
    
    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    subject = Column(String, nullable=False)
    total_problems = Column(Integer, nullable=False, default=0)
    anki_deck_name = Column(String)  # review deck, passed through untouched
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    study_plans = relationship("StudyPlan", back_populates="textbook", cascade="all, delete-orphan")
    study_logs = relationship("StudyLog", back_populates="textbook", cascade="all, delete-orphan")
