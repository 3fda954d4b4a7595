"""
Выборка занятий по фильтрам.

Каждый заданный фильтр превращается в отдельный предикат, предикаты
объединяются через AND. Вся выборка (страница + ученики + преподаватели)
выполняется одним запросом, поэтому видит один согласованный снимок БД.
"""
from __future__ import annotations

import logging
from typing import Dict, List

from sqlalchemy import and_, case, exists, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql.expression import ColumnElement, Select

from schedule_lessons.db.models import Lesson, LessonStudent, LessonTeacher, Student, Teacher
from schedule_lessons.dto.models import LessonOut, StudentOut, TeacherOut
from schedule_lessons.errors import QueryError
from schedule_lessons.services.normalizer import ListFilters

logger = logging.getLogger(__name__)


def attendance_subquery():
    """Агрегаты посещаемости по занятию: число записей и число визитов."""
    return (
        select(
            LessonStudent.lesson_id.label("lesson_id"),
            func.count().label("students_count"),
            func.sum(case((LessonStudent.visit, 1), else_=0)).label("visit_count"),
        )
        .group_by(LessonStudent.lesson_id)
        .subquery("attendance")
    )


def build_predicates(filters: ListFilters, students_count: ColumnElement) -> List[ColumnElement]:
    predicates: List[ColumnElement] = []
    if filters.date is not None:
        predicates.append(Lesson.date.between(filters.date.low, filters.date.high))
    if filters.status is not None:
        predicates.append(Lesson.status == filters.status)
    if filters.students_count is not None:
        predicates.append(students_count.between(filters.students_count.low, filters.students_count.high))
    if filters.teacher_ids is not None:
        # inner join: без подходящего назначения занятие не попадает в выдачу
        predicates.append(
            exists().where(
                LessonTeacher.lesson_id == Lesson.id,
                LessonTeacher.teacher_id.in_(filters.teacher_ids),
            )
        )
    return predicates


def compose_query(filters: ListFilters) -> Select:
    attendance = attendance_subquery()
    students_count = func.coalesce(attendance.c.students_count, 0)

    page = (
        select(
            Lesson.id,
            Lesson.date,
            Lesson.title,
            Lesson.status,
            func.coalesce(attendance.c.visit_count, 0).label("visit_count"),
        )
        .outerjoin(attendance, attendance.c.lesson_id == Lesson.id)
        .where(*build_predicates(filters, students_count))
        .order_by(Lesson.date, Lesson.id)
        .offset(filters.offset)
        .limit(filters.lessons_per_page)
        .cte("page")
    )

    teacher_join = LessonTeacher.lesson_id == page.c.id
    if filters.teacher_ids is not None:
        teacher_join = and_(teacher_join, LessonTeacher.teacher_id.in_(filters.teacher_ids))

    return (
        select(
            page,
            Student.id.label("student_id"),
            Student.name.label("student_name"),
            LessonStudent.visit.label("visit"),
            Teacher.id.label("teacher_id"),
            Teacher.name.label("teacher_name"),
        )
        .select_from(page)
        .outerjoin(LessonStudent, LessonStudent.lesson_id == page.c.id)
        .outerjoin(Student, Student.id == LessonStudent.student_id)
        .outerjoin(LessonTeacher, teacher_join)
        .outerjoin(Teacher, Teacher.id == LessonTeacher.teacher_id)
        .order_by(page.c.date, page.c.id, Student.id, Teacher.id)
    )


def _fold(rows) -> List[LessonOut]:
    """Строки JOIN (занятие x ученик x преподаватель) -> список занятий."""
    lessons: Dict[int, LessonOut] = {}
    seen_students: Dict[int, set] = {}
    seen_teachers: Dict[int, set] = {}

    for row in rows:
        r = row._mapping
        lesson = lessons.get(r["id"])
        if lesson is None:
            lesson = LessonOut(
                id=r["id"],
                date=r["date"],
                title=r["title"],
                status=r["status"],
                visit_count=r["visit_count"] or 0,
            )
            lessons[lesson.id] = lesson
            seen_students[lesson.id] = set()
            seen_teachers[lesson.id] = set()

        student_id = r["student_id"]
        if student_id is not None and student_id not in seen_students[lesson.id]:
            seen_students[lesson.id].add(student_id)
            lesson.students.append(StudentOut(id=student_id, name=r["student_name"], visit=bool(r["visit"])))

        teacher_id = r["teacher_id"]
        if teacher_id is not None and teacher_id not in seen_teachers[lesson.id]:
            seen_teachers[lesson.id].add(teacher_id)
            lesson.teachers.append(TeacherOut(id=teacher_id, name=r["teacher_name"]))

    for lesson in lessons.values():
        lesson.students.sort(key=lambda s: s.id)
        lesson.teachers.sort(key=lambda t: t.id)
    return list(lessons.values())


def list_lessons(session: Session, filters: ListFilters) -> List[LessonOut]:
    """Страница занятий по фильтрам, по возрастанию даты. Пустая выдача - не ошибка."""
    try:
        rows = session.execute(compose_query(filters)).all()
    except SQLAlchemyError as e:
        logger.exception("Ошибка выборки занятий")
        raise QueryError(str(e)) from e

    result = _fold(rows)
    logger.info(f"Выборка занятий: страница {filters.page}, найдено {len(result)}")
    return result
