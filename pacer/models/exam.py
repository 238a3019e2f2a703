from sqlalchemy import Column, Integer, String, Date, DateTime, Boolean, Text, Float, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from pacer.database import Base

class Exam(Base):
    """A real or mock exam on a calendar day"""
    __tablename__ = "exams"
    
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    date = Column(Date, nullable=False)
    is_mock = Column(Boolean, nullable=False, default=False)
    exam_type = Column(String, nullable=False)  # "descriptive", "multiple_choice", "combined"
    university_id = Column(Integer, ForeignKey("universities.id"))
    notes = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    university = relationship("University", back_populates="exams")
    subject_scores = relationship("SubjectScore", back_populates="exam", cascade="all, delete-orphan")
    
    @property
    def university_name(self):
        return self.university.name if self.university else None


class SubjectScore(Base):
    """Per-subject score within an exam"""
    __tablename__ = "subject_scores"
    
    id = Column(Integer, primary_key=True, index=True)
    exam_id = Column(Integer, ForeignKey("exams.id"), nullable=False, index=True)
    exam_type = Column(String, nullable=False)  # e.g. common test vs. second-stage
    subject = Column(String, nullable=False)
    score = Column(Float)
    max_score = Column(Float)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    exam = relationship("Exam", back_populates="subject_scores")
