from pacer.crud.university import (
    create_university,
    get_university,
    list_universities,
    update_university,
    delete_university
)
from pacer.crud.textbook import (
    create_textbook,
    get_textbook,
    list_textbooks,
    list_subjects,
    update_textbook,
    link_anki_deck,
    delete_textbook
)
from pacer.crud.study_plan import (
    create_study_plan,
    get_study_plan,
    get_plan_for_textbook,
    list_study_plans,
    list_plan_windows,
    get_active_plans,
    replace_study_plan,
    delete_study_plan
)
from pacer.crud.study_log import (
    create_study_log,
    get_study_log,
    find_study_log,
    upsert_study_log,
    list_study_logs,
    get_logs_for_textbook,
    get_logs_for_year,
    delete_study_log
)
from pacer.crud.exam import (
    create_exam,
    get_exam,
    list_exams,
    list_exam_days,
    update_exam,
    delete_exam,
    get_subject_scores,
    batch_upsert_subject_scores
)

__all__ = [
    "create_university",
    "get_university",
    "list_universities",
    "update_university",
    "delete_university",
    "create_textbook",
    "get_textbook",
    "list_textbooks",
    "list_subjects",
    "update_textbook",
    "link_anki_deck",
    "delete_textbook",
    "create_study_plan",
    "get_study_plan",
    "get_plan_for_textbook",
    "list_study_plans",
    "list_plan_windows",
    "get_active_plans",
    "replace_study_plan",
    "delete_study_plan",
    "create_study_log",
    "get_study_log",
    "find_study_log",
    "upsert_study_log",
    "list_study_logs",
    "get_logs_for_textbook",
    "get_logs_for_year",
    "delete_study_log",
    "create_exam",
    "get_exam",
    "list_exams",
    "list_exam_days",
    "update_exam",
    "delete_exam",
    "get_subject_scores",
    "batch_upsert_subject_scores",
]
