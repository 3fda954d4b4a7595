from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Iterable, List, Optional, Sequence

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from schedule_lessons.database import transaction
from schedule_lessons.db.models import Lesson, LessonTeacher
from schedule_lessons.errors import RequestCancelled, WriteError
from schedule_lessons.services.normalizer import SeriesRequest
from schedule_lessons.services.recurrence import generate

logger = logging.getLogger(__name__)


def create_lessons(
    session: Session,
    title: str,
    dates: Sequence[date],
    teacher_ids: Iterable[int] = (),
    is_cancelled: Optional[Callable[[], bool]] = None,
) -> List[int]:
    """
    Создает занятия на каждую дату и назначает на каждое всех преподавателей
    в одной транзакции. Возвращает id занятий в порядке дат.
    """
    teachers = sorted(set(teacher_ids))
    try:
        with transaction(session):
            lessons = [Lesson(date=day, title=title, status=0) for day in dates]
            # flush в порядке добавления -> id растут вместе с датами
            session.add_all(lessons)
            session.flush()

            if teachers:
                session.add_all(
                    LessonTeacher(lesson_id=lesson.id, teacher_id=teacher_id)
                    for lesson in lessons
                    for teacher_id in teachers
                )
                session.flush()

            if is_cancelled is not None and is_cancelled():
                raise RequestCancelled("client disconnected before commit")

            lesson_ids = [lesson.id for lesson in lessons]
    except IntegrityError as e:
        logger.exception("Нарушение ограничений при создании занятий")
        raise WriteError(str(e.orig), conflict=True) from e
    except SQLAlchemyError as e:
        logger.exception("Ошибка БД при создании занятий")
        raise WriteError(str(e)) from e

    logger.info(f"Создано занятий: {len(lesson_ids)}, назначений: {len(lesson_ids) * len(teachers)}")
    return lesson_ids


def schedule_series(
    session: Session,
    series: SeriesRequest,
    is_cancelled: Optional[Callable[[], bool]] = None,
) -> List[int]:
    """Путь создания: генерация дат серии и их атомарная запись."""
    dates = generate(
        series.first_date,
        series.days,
        lessons_count=series.lessons_count,
        last_date=series.last_date,
        lessons_max=series.limits.lessons_max,
        interval_max=series.limits.interval_max,
    )
    logger.info(
        f"Серия '{series.title}': {len(dates)} дат c {series.first_date} "
        f"(дни {list(series.days)}, преподаватели {list(series.teacher_ids)})"
    )
    return create_lessons(session, series.title, dates, series.teacher_ids, is_cancelled)
