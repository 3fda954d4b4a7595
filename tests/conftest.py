import os
import tempfile
from datetime import date
from pathlib import Path

# БД и логи тестов - во временном каталоге; задается до импорта пакета
TMP_DIR = Path(tempfile.mkdtemp(prefix="schedule_lessons_"))
os.environ["DATABASE_URL"] = f"sqlite:///{TMP_DIR / 'test.db'}"
os.environ["LOG_DIR"] = str(TMP_DIR / "logs")
os.environ["LOG_TO_DB"] = "false"

import pytest

from schedule_lessons.database import SessionLocal, engine
from schedule_lessons.db.models import Base, Lesson, LessonStudent, LessonTeacher, Student, Teacher


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def session():
    with SessionLocal() as s:
        yield s


@pytest.fixture
def people(session):
    session.add_all(
        [
            Teacher(id=3, name="Sergey"),
            Teacher(id=7, name="Olga"),
            Student(id=1, name="Ivan"),
            Student(id=2, name="Maria"),
            Student(id=3, name="Petr"),
        ]
    )
    session.commit()


@pytest.fixture
def add_lesson(session, people):
    def _add(day: date, title: str = "Math", status: int = 0, teachers=(), students=None) -> int:
        lesson = Lesson(date=day, title=title, status=status)
        session.add(lesson)
        session.flush()
        for teacher_id in teachers:
            session.add(LessonTeacher(lesson_id=lesson.id, teacher_id=teacher_id))
        for student_id, visit in (students or {}).items():
            session.add(LessonStudent(lesson_id=lesson.id, student_id=student_id, visit=visit))
        session.commit()
        return lesson.id

    return _add
