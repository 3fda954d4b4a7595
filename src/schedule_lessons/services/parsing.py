"""
Первый этап нормализации: разбор компактных строковых записей
("2024-03-01,2024-03-31", "3,7") в типизированные значения.

Функции чистые и ничего не знают о структуре запроса; структурные
ограничения проверяет normalizer.
"""
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Callable, List, Tuple, TypeVar

from schedule_lessons.dto.models import DateRange, IntRange
from schedule_lessons.errors import ParseError

T = TypeVar("T")

DATE_FORMAT = "%Y-%m-%d"
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_INT_RE = re.compile(r"^[+-]?\d+$")

RANGE_MAX_ITEMS = 2


def split_values(value: Any, field: str) -> List[str]:
    """Строка "a,b" / число / массив -> список непустых элементов."""
    if isinstance(value, bool):
        raise ParseError(field, "must be a comma-joined string, a number or an array")
    if isinstance(value, int):
        return [str(value)]
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = []
        for item in value:
            if isinstance(item, bool) or not isinstance(item, (int, str)):
                raise ParseError(field, f"unsupported item {item!r}")
            items.append(str(item))
    else:
        raise ParseError(field, "must be a comma-joined string, a number or an array")

    items = [item.strip() for item in items]
    if not items:
        raise ParseError(field, "is empty")
    if any(not item for item in items):
        raise ParseError(field, "contains an empty value")
    return items


def parse_date(text: str, field: str = "date") -> date:
    if not isinstance(text, str) or not _DATE_RE.match(text.strip()):
        raise ParseError(field, f"{text!r} is not a YYYY-MM-DD date")
    try:
        return datetime.strptime(text.strip(), DATE_FORMAT).date()
    except ValueError:
        raise ParseError(field, f"{text!r} is not a valid calendar date") from None


def parse_int(text: str, field: str = "value") -> int:
    if not _INT_RE.match(text):
        raise ParseError(field, f"{text!r} is not an integer")
    return int(text)


def _parse_pair(value: Any, field: str, item_parser: Callable[[str, str], T]) -> Tuple[T, T]:
    items = split_values(value, field)
    if len(items) > RANGE_MAX_ITEMS:
        raise ParseError(field, f"accepts at most {RANGE_MAX_ITEMS} values, got {len(items)}")
    parsed = [item_parser(item, field) for item in items]
    # одиночное значение -> [v, v]
    return min(parsed), max(parsed)


def parse_date_range(value: Any, field: str = "date") -> DateRange:
    return DateRange(*_parse_pair(value, field, parse_date))


def parse_int_range(value: Any, field: str) -> IntRange:
    return IntRange(*_parse_pair(value, field, parse_int))


def parse_id_set(value: Any, field: str) -> Tuple[int, ...]:
    """Набор идентификаторов без ограничения длины: без повторов, по возрастанию."""
    items = split_values(value, field)
    return tuple(sorted({parse_int(item, field) for item in items}))
