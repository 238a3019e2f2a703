from sqlalchemy import Column, Integer, Date, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from pacer.database import Base

class StudyLog(Base):
    """Problems actually solved for a textbook on one day"""
    __tablename__ = "study_logs"
    
    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False, index=True)
    textbook_id = Column(Integer, ForeignKey("textbooks.id"), nullable=False, index=True)
    planned_amount = Column(Integer, nullable=False, default=0)  # informational
    actual_amount = Column(Integer, nullable=False, default=0)
    notes = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    textbook = relationship("Textbook", back_populates="study_logs")
    
    @property
    def textbook_title(self):
        return self.textbook.title if self.textbook else None
    
    @property
    def textbook_subject(self):
        return self.textbook.subject if self.textbook else None
