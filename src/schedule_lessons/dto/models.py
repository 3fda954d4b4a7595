from datetime import date
from typing import List, NamedTuple

from pydantic import BaseModel, ConfigDict, Field


class DateRange(NamedTuple):
    low: date
    high: date


class IntRange(NamedTuple):
    low: int
    high: int


class StudentOut(BaseModel):
    id: int
    name: str
    visit: bool


class TeacherOut(BaseModel):
    id: int
    name: str


class LessonOut(BaseModel):
    """Занятие в ответе списка: агрегаты посещаемости и назначенные преподаватели."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    date: date
    title: str
    status: int
    visit_count: int = Field(0, alias="visitCount")
    students: List[StudentOut] = Field(default_factory=list)
    teachers: List[TeacherOut] = Field(default_factory=list)
