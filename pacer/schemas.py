from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Dict, List, Optional
from datetime import date

from pacer.weekday_goals import parse_weekday_goals

class UniversityCreate(BaseModel):
    """Schema for creating a university"""
    name: str = Field(min_length=1)
    rank: Optional[int] = None
    notes: Optional[str] = None

class UniversityRead(UniversityCreate):
    """Schema for university response"""
    id: int

    class Config:
        from_attributes = True

class TextbookCreate(BaseModel):
    """Schema for creating a textbook"""
    title: str = Field(min_length=1)
    subject: str = Field(min_length=1)
    total_problems: int = Field(default=0, ge=0)
    anki_deck_name: Optional[str] = None

class TextbookRead(TextbookCreate):
    """Schema for textbook response"""
    id: int

    class Config:
        from_attributes = True

class StudyPlanCreate(BaseModel):
    """Schema for creating or fully replacing a study plan"""
    textbook_id: int = Field(gt=0)
    start_date: date
    end_date: date
    daily_goal: Optional[int] = Field(default=None, ge=0)
    buffer_days: int = Field(default=0, ge=0)
    weekday_goals: Optional[str] = None  # serialized, see serialize_weekday_goals
    total_problems: Optional[int] = Field(default=None, gt=0)

    @model_validator(mode="after")
    def check_window(self):
        if self.end_date < self.start_date:
            raise ValueError("End date cannot be earlier than start date")
        return self

class StudyPlanRead(BaseModel):
    """
    Study plan as seen by the core.

    weekday_goals is parsed from its stored JSON here, once. A missing or
    unparsable map becomes None, meaning daily_goal applies to every day.
    """
    id: int
    textbook_id: int
    start_date: date
    end_date: date
    daily_goal: Optional[int] = None
    buffer_days: int = 0
    weekday_goals: Optional[Dict[int, int]] = None
    total_problems: Optional[int] = None
    textbook_title: Optional[str] = None
    textbook_subject: Optional[str] = None
    textbook_total_problems: Optional[int] = None
    anki_deck_name: Optional[str] = None

    class Config:
        from_attributes = True

    @field_validator("weekday_goals", mode="before")
    @classmethod
    def parse_stored_goals(cls, value):
        if value is None or isinstance(value, dict):
            return value
        return parse_weekday_goals(value)

class StudyLogCreate(BaseModel):
    """Schema for recording a day's work on a textbook"""
    date: date
    textbook_id: int = Field(gt=0)
    planned_amount: int = Field(default=0, ge=0)
    actual_amount: int = Field(default=0, ge=0)
    notes: Optional[str] = None

class StudyLogRead(StudyLogCreate):
    """Schema for study log response"""
    id: int
    textbook_title: Optional[str] = None
    textbook_subject: Optional[str] = None

    class Config:
        from_attributes = True

class ExamCreate(BaseModel):
    """Schema for creating an exam"""
    name: str = Field(min_length=1)
    date: date
    is_mock: bool = False
    exam_type: str
    university_id: Optional[int] = None
    notes: Optional[str] = None

class ExamRead(ExamCreate):
    """Schema for exam response"""
    id: int
    university_name: Optional[str] = None

    class Config:
        from_attributes = True

class SubjectScoreInput(BaseModel):
    """One row of a batch subject score upsert"""
    exam_type: str = Field(min_length=1)
    subject: str = Field(min_length=1)
    score: Optional[float] = None
    max_score: Optional[float] = None

class SubjectScoreRead(SubjectScoreInput):
    """Schema for subject score response"""
    id: int
    exam_id: int

    class Config:
        from_attributes = True

class BatchSubjectScores(BaseModel):
    """Schema for upserting all subject scores of an exam at once"""
    exam_id: int
    scores: List[SubjectScoreInput]
