from __future__ import annotations

from contextlib import contextmanager
from typing import Generator, Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from schedule_lessons.config import get_settings
from schedule_lessons.db.models import Base

settings = get_settings()

# SQLAlchemy настройки
engine = create_engine(settings.DATABASE_URL, echo=False, future=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@event.listens_for(Engine, "connect")
def _enable_sqlite_fk(dbapi_connection, connection_record):
    """SQLite по умолчанию не проверяет внешние ключи."""
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def init_db():
    Base.metadata.create_all(bind=engine)


def get_db() -> Generator[Session, None, None]:
    """
    Зависимость FastAPI: дает открытый Session
    и гарантирует закрытие по завершении запроса.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(session: Session) -> Iterator[Session]:
    """
    Явная граница транзакции: commit при нормальном выходе,
    rollback при любом исключении (включая отмену запроса).
    """
    try:
        yield session
        session.commit()
    except BaseException:
        session.rollback()
        raise
