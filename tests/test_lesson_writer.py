from datetime import date

import pytest
from sqlalchemy import func, select

from schedule_lessons.database import SessionLocal
from schedule_lessons.db.models import Lesson, LessonTeacher
from schedule_lessons.errors import RequestCancelled, WriteError
from schedule_lessons.services.lesson_writer import create_lessons, schedule_series
from schedule_lessons.services.normalizer import parse_recurrence_request

DATES = [date(2024, 3, 1), date(2024, 3, 8), date(2024, 3, 15)]


def _count(model) -> int:
    with SessionLocal() as s:
        return s.scalar(select(func.count()).select_from(model))


def test_creates_lessons_and_all_assignments(session, people):
    ids = create_lessons(session, "Math", DATES, [7, 3])

    assert len(ids) == 3
    assert ids == sorted(ids)
    with SessionLocal() as s:
        lessons = s.scalars(select(Lesson).order_by(Lesson.id)).all()
        assert [l.date for l in lessons] == DATES
        assert {l.status for l in lessons} == {0}
        assert {l.title for l in lessons} == {"Math"}

        pairs = s.execute(
            select(LessonTeacher.lesson_id, LessonTeacher.teacher_id).order_by(
                LessonTeacher.lesson_id, LessonTeacher.teacher_id
            )
        ).all()
    assert [tuple(p) for p in pairs] == [(i, t) for i in ids for t in (3, 7)]


def test_no_teachers_means_no_assignments(session, people):
    ids = create_lessons(session, "Math", DATES, [])

    assert len(ids) == 3
    assert _count(LessonTeacher) == 0


def test_empty_date_list(session, people):
    assert create_lessons(session, "Math", [], [3]) == []
    assert _count(Lesson) == 0


def test_failed_assignment_rolls_back_everything(session, people):
    with pytest.raises(WriteError) as exc_info:
        create_lessons(session, "Math", DATES, [3, 999])

    assert exc_info.value.conflict
    assert _count(Lesson) == 0
    assert _count(LessonTeacher) == 0


def test_cancelled_request_rolls_back(session, people):
    with pytest.raises(RequestCancelled):
        create_lessons(session, "Math", DATES, [3], is_cancelled=lambda: True)

    assert _count(Lesson) == 0
    assert _count(LessonTeacher) == 0


def test_session_is_usable_after_failure(session, people):
    with pytest.raises(WriteError):
        create_lessons(session, "Math", DATES, [999])

    ids = create_lessons(session, "Math", DATES[:1], [7])
    assert len(ids) == 1


def test_schedule_series_generates_and_writes(session, people):
    series = parse_recurrence_request(
        {"title": "Math", "days": [5], "firstDate": "2024-03-01", "lastDate": "2024-03-22", "teacherIds": [3]}
    )

    ids = schedule_series(session, series)

    assert len(ids) == 4
    assert _count(LessonTeacher) == 4
    with SessionLocal() as s:
        assert s.scalars(select(Lesson.date).order_by(Lesson.id)).all() == [
            date(2024, 3, 1),
            date(2024, 3, 8),
            date(2024, 3, 15),
            date(2024, 3, 22),
        ]
