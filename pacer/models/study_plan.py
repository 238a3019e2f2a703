from sqlalchemy import Column, Integer, Date, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from pacer.database import Base

class StudyPlan(Base):
    """Study plan window for one textbook"""
    __tablename__ = "study_plans"
    
    id = Column(Integer, primary_key=True, index=True)
    textbook_id = Column(Integer, ForeignKey("textbooks.id"), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    daily_goal = Column(Integer)  # fallback when a weekday has no goal
    buffer_days = Column(Integer, nullable=False, default=0)
    weekday_goals = Column(Text)  # JSON object keyed "0".."6", Sunday=0
    total_problems = Column(Integer)  # overrides the textbook total when set
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    textbook = relationship("Textbook", back_populates="study_plans")
    
    @property
    def textbook_title(self):
        return self.textbook.title if self.textbook else None
    
    @property
    def textbook_subject(self):
        return self.textbook.subject if self.textbook else None
    
    @property
    def textbook_total_problems(self):
        return self.textbook.total_problems if self.textbook else None
    
    @property
    def anki_deck_name(self):
        return self.textbook.anki_deck_name if self.textbook else None
