from pacer.models.university import University
from pacer.models.textbook import Textbook
from pacer.models.study_plan import StudyPlan
from pacer.models.study_log import StudyLog
from pacer.models.exam import Exam, SubjectScore

__all__ = [
    "University",
    "Textbook",
    "StudyPlan",
    "StudyLog",
    "Exam",
    "SubjectScore"
]
