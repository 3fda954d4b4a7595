from datetime import datetime as dt_datetime, date as dt_date
from typing import List

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, SmallInteger, String, false
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    pass


class LogEntry(Base):
    __tablename__ = "logs"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    timestamp: Mapped[dt_datetime] = mapped_column(DateTime, server_default=func.now())
    level: Mapped[str] = mapped_column(String)
    message: Mapped[str] = mapped_column(String)


class Teacher(Base):
    __tablename__ = "teachers"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(10), nullable=False)


class Student(Base):
    __tablename__ = "students"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(10), nullable=False)


class Lesson(Base):
    __tablename__ = "lessons"

    id: Mapped[int] = mapped_column(primary_key=True)
    date: Mapped[dt_date] = mapped_column(Date, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    status: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=0, server_default="0")

    students: Mapped[List["LessonStudent"]] = relationship(back_populates="lesson")
    teachers: Mapped[List["LessonTeacher"]] = relationship(back_populates="lesson")


class LessonStudent(Base):
    """Посещаемость: связь занятия и ученика с отметкой о визите."""

    __tablename__ = "lesson_students"

    lesson_id: Mapped[int] = mapped_column(ForeignKey("lessons.id"), primary_key=True)
    student_id: Mapped[int] = mapped_column(ForeignKey("students.id"), primary_key=True)
    visit: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())

    lesson: Mapped[Lesson] = relationship(back_populates="students")


class LessonTeacher(Base):
    __tablename__ = "lesson_teachers"

    lesson_id: Mapped[int] = mapped_column(ForeignKey("lessons.id"), primary_key=True)
    teacher_id: Mapped[int] = mapped_column(ForeignKey("teachers.id"), primary_key=True)

    lesson: Mapped[Lesson] = relationship(back_populates="teachers")
