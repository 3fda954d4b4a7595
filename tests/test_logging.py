import logging

from sqlalchemy import select

from schedule_lessons.database import SessionLocal
from schedule_lessons.db.models import LogEntry
from schedule_lessons.logs.db_logger import DBLogHandler


def test_db_handler_writes_log_entries():
    handler = DBLogHandler(session_factory=SessionLocal)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger = logging.getLogger("schedule_lessons.test_db_handler")
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    try:
        logger.info("Создано занятий: 4")
    finally:
        logger.removeHandler(handler)

    with SessionLocal() as s:
        entries = s.scalars(select(LogEntry)).all()
    assert [(e.level, e.message) for e in entries] == [("INFO", "INFO: Создано занятий: 4")]


def test_db_handler_skips_sqlalchemy_records():
    handler = DBLogHandler(session_factory=SessionLocal)
    record = logging.LogRecord("sqlalchemy.engine", logging.INFO, __file__, 1, "SELECT 1", None, None)

    handler.emit(record)

    with SessionLocal() as s:
        assert s.scalars(select(LogEntry)).all() == []
