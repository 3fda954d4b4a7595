"""
Второй этап нормализации: структурная проверка уже типизированных значений.

Сырые поля с компактной записью сначала разбираются в services.parsing,
затем pydantic-модели проверяют обязательность, границы и условие
"ровно одно из lessonsCount / lastDate".
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Tuple

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from schedule_lessons.config import get_settings
from schedule_lessons.dto.models import DateRange, IntRange
from schedule_lessons.errors import ValidationError
from schedule_lessons.services.parsing import parse_date, parse_date_range, parse_id_set, parse_int_range
from schedule_lessons.services.recurrence import INTERVAL_MAX, LESSONS_MAX

XOR_FIELD = "lessonsCount"

# OFFSET = lessonsPerPage * (page - 1) должен помещаться в BIGINT
PAGE_MAX = 2**31 - 1


class ListFilters(BaseModel):
    """Нормализованные фильтры списка. None - фильтр не задан."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    date: Optional[DateRange] = None
    status: Optional[int] = Field(None, ge=0, le=1)
    teacher_ids: Optional[Tuple[int, ...]] = Field(None, alias="teacherIds")
    students_count: Optional[IntRange] = Field(None, alias="studentsCount")
    page: int = Field(1, ge=1, le=PAGE_MAX)
    lessons_per_page: int = Field(5, ge=1, le=PAGE_MAX, alias="lessonsPerPage")

    @property
    def offset(self) -> int:
        return self.lessons_per_page * (self.page - 1)


class RecurrenceRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    teacher_ids: Optional[List[int]] = Field(None, alias="teacherIds")
    title: str = Field(..., min_length=1, max_length=100)
    days: List[int] = Field(..., min_length=1, max_length=7)
    first_date: date = Field(..., alias="firstDate")
    lessons_count: Optional[int] = Field(None, gt=0, alias="lessonsCount")
    last_date: Optional[date] = Field(None, alias="lastDate")

    @field_validator("days")
    @classmethod
    def _days_in_week(cls, value: List[int]) -> List[int]:
        for day in value:
            if not 0 <= day <= 6:
                raise ValueError(f"weekday {day} is out of range 0..6")
        return value

    @field_validator("last_date")
    @classmethod
    def _not_before_first(cls, value: Optional[date], info: ValidationInfo) -> Optional[date]:
        first = info.data.get("first_date")
        if value is not None and first is not None and value < first:
            raise ValueError("must not be earlier than firstDate")
        return value

    @model_validator(mode="after")
    def _count_xor_last(self) -> "RecurrenceRequest":
        if (self.lessons_count is None) == (self.last_date is None):
            raise ValueError("exactly one of lessonsCount or lastDate must be provided")
        return self


@dataclass(frozen=True)
class SeriesLimits:
    """Системные ограничения серии; из запроса не задаются."""

    lessons_max: int = LESSONS_MAX
    interval_max: relativedelta = INTERVAL_MAX

    @classmethod
    def from_settings(cls) -> "SeriesLimits":
        settings = get_settings()
        return cls(lessons_max=settings.LESSONS_MAX, interval_max=settings.interval_max)


@dataclass(frozen=True)
class SeriesRequest:
    title: str
    days: Tuple[int, ...]
    first_date: date
    lessons_count: Optional[int]
    last_date: Optional[date]
    teacher_ids: Tuple[int, ...]
    limits: SeriesLimits


def _from_pydantic(exc: PydanticValidationError) -> ValidationError:
    error = exc.errors()[0]
    loc = [str(part) for part in error.get("loc", ())]
    field = ".".join(loc) if loc else XOR_FIELD
    reason = error.get("msg", "invalid value")
    if reason.startswith("Value error, "):
        reason = reason[len("Value error, "):]
    return ValidationError(field, reason)


def _require_mapping(raw: Any) -> Mapping[str, Any]:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise ValidationError("body", "must be a JSON object")
    return raw


def parse_list_filters(raw: Any) -> ListFilters:
    """Сырые поля запроса списка -> ListFilters. null или отсутствие поля = фильтра нет."""
    data: Dict[str, Any] = {key: value for key, value in _require_mapping(raw).items() if value is not None}

    if "date" in data:
        data["date"] = parse_date_range(data["date"], "date")
    if "teacherIds" in data:
        data["teacherIds"] = parse_id_set(data["teacherIds"], "teacherIds")
    if "studentsCount" in data:
        data["studentsCount"] = parse_int_range(data["studentsCount"], "studentsCount")
    data.setdefault("lessonsPerPage", get_settings().DEFAULT_LESSONS_PER_PAGE)

    try:
        return ListFilters.model_validate(data)
    except PydanticValidationError as exc:
        raise _from_pydantic(exc) from None


def parse_recurrence_request(raw: Any, limits: Optional[SeriesLimits] = None) -> SeriesRequest:
    data: Dict[str, Any] = {key: value for key, value in _require_mapping(raw).items() if value is not None}

    # даты - только строго YYYY-MM-DD, без "умных" преобразований pydantic
    for key in ("firstDate", "lastDate"):
        if key in data:
            data[key] = parse_date(data[key], key)

    try:
        request = RecurrenceRequest.model_validate(data)
    except PydanticValidationError as exc:
        raise _from_pydantic(exc) from None

    return SeriesRequest(
        title=request.title,
        days=tuple(sorted(set(request.days))),
        first_date=request.first_date,
        lessons_count=request.lessons_count,
        last_date=request.last_date,
        teacher_ids=tuple(sorted(set(request.teacher_ids or ()))),
        limits=limits or SeriesLimits.from_settings(),
    )
