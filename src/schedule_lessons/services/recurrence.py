"""
Генерация дат серии повторяющихся занятий.

Дни недели нумеруются как в PostgreSQL ``EXTRACT(DOW ...)``:
0 - воскресенье, 1 - понедельник, ..., 6 - суббота.
"""
from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, List, Optional, Union

from dateutil.relativedelta import relativedelta

LESSONS_MAX = 300
INTERVAL_MAX = relativedelta(years=1)

Interval = Union[timedelta, relativedelta]


def dow(day: date) -> int:
    """Номер дня недели, воскресенье = 0."""
    return day.isoweekday() % 7


def _shift(start: date, delta: Interval) -> date:
    try:
        return start + delta
    except (OverflowError, ValueError):
        return date.max


def generate(
    first_date: date,
    days: Iterable[int],
    *,
    lessons_count: Optional[int] = None,
    last_date: Optional[date] = None,
    lessons_max: int = LESSONS_MAX,
    interval_max: Interval = INTERVAL_MAX,
) -> List[date]:
    """
    Возвращает упорядоченный список дат занятий.

    Граница перебора: first_date + ceil(lessons_count / len(days)) недель,
    либо last_date. Поверх нее всегда действуют оба ограничения:
    не больше lessons_max дат и не позже last_date (или first_date + interval_max).
    """
    if (lessons_count is None) == (last_date is None):
        raise ValueError("exactly one of lessons_count or last_date must be given")

    weekdays = frozenset(days)
    if not weekdays or lessons_count == 0:
        return []

    if lessons_count is not None:
        # целочисленный ceil: float-деление переполняется на огромных lessons_count
        weeks = -(-lessons_count // len(weekdays))
        try:
            bound = _shift(first_date, timedelta(weeks=weeks))
        except OverflowError:
            # timedelta не вмещает такое число недель
            bound = date.max
        limit = min(lessons_count, lessons_max)
        horizon = _shift(first_date, interval_max)
    else:
        bound = last_date
        limit = lessons_max
        horizon = last_date

    end = min(bound, horizon)
    result: List[date] = []
    current = first_date
    while current <= end and len(result) < limit:
        if dow(current) in weekdays:
            result.append(current)
        if current == date.max:
            break
        current += timedelta(days=1)
    return result
