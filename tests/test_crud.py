from datetime import date

import pytest
from sqlalchemy.exc import SQLAlchemyError

from pacer import crud
from pacer.schemas import (
    ExamCreate,
    StudyLogCreate,
    StudyPlanCreate,
    StudyPlanRead,
    SubjectScoreInput,
    TextbookCreate,
    UniversityCreate,
)


def make_log(textbook_id, day, actual, planned=0):
    return StudyLogCreate(date=day, textbook_id=textbook_id, planned_amount=planned, actual_amount=actual)


def make_plan(db, textbook_id, start, end, weekday_goals='{"1": 10}'):
    return crud.create_study_plan(db, StudyPlanCreate(
        textbook_id=textbook_id, start_date=start, end_date=end,
        daily_goal=10, weekday_goals=weekday_goals,
    ))


class TestStudyLogs:
    def test_upsert_overwrites_the_same_day(self, db, textbook):
        crud.upsert_study_log(db, make_log(textbook.id, date(2024, 4, 1), 5))
        updated = crud.upsert_study_log(db, make_log(textbook.id, date(2024, 4, 1), 12, planned=10))

        logs = crud.get_logs_for_textbook(db, textbook.id)
        assert len(logs) == 1
        assert logs[0].id == updated.id
        assert logs[0].actual_amount == 12
        assert logs[0].planned_amount == 10

    def test_list_newest_first_with_filters(self, db, textbook):
        other = crud.create_textbook(db, TextbookCreate(title="Red Chart", subject="Math", total_problems=100))
        for day, amount in [(date(2024, 4, 1), 1), (date(2024, 4, 3), 3), (date(2024, 4, 2), 2)]:
            crud.create_study_log(db, make_log(textbook.id, day, amount))
        crud.create_study_log(db, make_log(other.id, date(2024, 4, 2), 9))

        logs = crud.list_study_logs(db, textbook_id=textbook.id)
        assert [log.actual_amount for log in logs] == [3, 2, 1]

        ranged = crud.list_study_logs(db, start_date=date(2024, 4, 2), end_date=date(2024, 4, 2))
        assert sorted(log.actual_amount for log in ranged) == [2, 9]

    def test_logs_for_year(self, db, textbook):
        crud.create_study_log(db, make_log(textbook.id, date(2023, 12, 31), 1))
        crud.create_study_log(db, make_log(textbook.id, date(2024, 1, 1), 2))
        crud.create_study_log(db, make_log(textbook.id, date(2024, 12, 31), 3))

        logs = crud.get_logs_for_year(db, 2024)
        assert [log.actual_amount for log in logs] == [2, 3]
        assert crud.get_logs_for_year(db, 2024, textbook_ids=[]) == []

    def test_log_exposes_textbook_names(self, db, textbook):
        log = crud.create_study_log(db, make_log(textbook.id, date(2024, 4, 1), 1))
        assert log.textbook_title == "Blue Chart"
        assert log.textbook_subject == "Math"


class TestStudyPlans:
    def test_list_by_overlapping_range(self, db, textbook):
        other = crud.create_textbook(db, TextbookCreate(title="Red Chart", subject="Math", total_problems=100))
        early = make_plan(db, textbook.id, date(2024, 1, 1), date(2024, 2, 29))
        late = make_plan(db, other.id, date(2024, 6, 1), date(2024, 8, 31))

        plans = crud.list_study_plans(db, date(2024, 2, 1), date(2024, 3, 31))
        assert [p.id for p in plans] == [early.id]

        plans = crud.list_study_plans(db)
        assert [p.id for p in plans] == [early.id, late.id]

    def test_active_plans(self, db, textbook):
        plan = make_plan(db, textbook.id, date(2024, 4, 1), date(2024, 5, 5))

        assert [p.id for p in crud.get_active_plans(db, date(2024, 5, 5))] == [plan.id]
        assert crud.get_active_plans(db, date(2024, 5, 6)) == []

    def test_replace_overwrites_every_field(self, db, textbook):
        plan = make_plan(db, textbook.id, date(2024, 4, 1), date(2024, 5, 5))

        crud.replace_study_plan(db, plan.id, StudyPlanCreate(
            textbook_id=textbook.id, start_date=date(2024, 4, 8), end_date=date(2024, 4, 30),
        ))

        db_plan = crud.get_study_plan(db, plan.id)
        assert db_plan.start_date == date(2024, 4, 8)
        assert db_plan.daily_goal is None
        assert db_plan.weekday_goals is None

    def test_read_schema_parses_weekday_goals(self, db, textbook):
        plan = make_plan(db, textbook.id, date(2024, 4, 1), date(2024, 5, 5), weekday_goals='{"0": 5, "1": 10}')

        read = StudyPlanRead.model_validate(plan)
        assert read.weekday_goals == {0: 5, 1: 10}
        assert read.textbook_title == "Blue Chart"
        assert read.textbook_total_problems == 300

    def test_read_schema_falls_back_on_unparsable_goals(self, db, textbook):
        plan = make_plan(db, textbook.id, date(2024, 4, 1), date(2024, 5, 5), weekday_goals="{broken")
        assert StudyPlanRead.model_validate(plan).weekday_goals is None

    def test_deleting_a_textbook_removes_its_plans_and_logs(self, db, textbook):
        make_plan(db, textbook.id, date(2024, 4, 1), date(2024, 5, 5))
        crud.create_study_log(db, make_log(textbook.id, date(2024, 4, 1), 1))

        assert crud.delete_textbook(db, textbook.id)
        assert crud.list_study_plans(db) == []
        assert crud.list_study_logs(db) == []


class TestExams:
    def test_deleting_a_university_keeps_its_exams(self, db):
        university = crud.create_university(db, UniversityCreate(name="Todai", rank=1))
        exam = crud.create_exam(db, ExamCreate(
            name="Second Stage", date=date(2025, 2, 25), exam_type="descriptive", university_id=university.id,
        ))
        assert exam.university_name == "Todai"

        assert crud.delete_university(db, university.id)
        exam = crud.get_exam(db, exam.id)
        assert exam.university_id is None
        assert exam.university_name is None

    def test_list_exams_filters(self, db):
        crud.create_exam(db, ExamCreate(name="Mock", date=date(2024, 8, 1), is_mock=True, exam_type="combined"))
        crud.create_exam(db, ExamCreate(name="Real", date=date(2025, 1, 18), exam_type="multiple_choice"))

        assert [e.name for e in crud.list_exams(db)] == ["Mock", "Real"]
        assert [e.name for e in crud.list_exams(db, is_mock=False)] == ["Real"]
        assert [e.name for e in crud.list_exams(db, range_end=date(2024, 12, 31))] == ["Mock"]

    def test_batch_upsert_subject_scores(self, db):
        exam = crud.create_exam(db, ExamCreate(name="Mock", date=date(2024, 8, 1), is_mock=True, exam_type="combined"))

        crud.batch_upsert_subject_scores(db, exam.id, [
            SubjectScoreInput(exam_type="common", subject="Math", score=70, max_score=100),
            SubjectScoreInput(exam_type="common", subject="English", score=80, max_score=100),
        ])
        rows = crud.batch_upsert_subject_scores(db, exam.id, [
            SubjectScoreInput(exam_type="common", subject="Math", score=75, max_score=100),
        ])

        assert [(r.subject, r.score) for r in rows] == [("English", 80), ("Math", 75)]

    def test_batch_upsert_is_all_or_nothing(self, db, monkeypatch):
        exam = crud.create_exam(db, ExamCreate(name="Mock", date=date(2024, 8, 1), is_mock=True, exam_type="combined"))
        crud.batch_upsert_subject_scores(db, exam.id, [
            SubjectScoreInput(exam_type="common", subject="Math", score=70, max_score=100),
        ])

        def failing_commit():
            raise SQLAlchemyError("disk full")

        monkeypatch.setattr(db, "commit", failing_commit)
        with pytest.raises(SQLAlchemyError):
            crud.batch_upsert_subject_scores(db, exam.id, [
                SubjectScoreInput(exam_type="common", subject="Math", score=99, max_score=100),
                SubjectScoreInput(exam_type="common", subject="Physics", score=50, max_score=100),
            ])
        monkeypatch.undo()

        rows = crud.get_subject_scores(db, exam.id)
        assert [(r.subject, r.score) for r in rows] == [("Math", 70)]
