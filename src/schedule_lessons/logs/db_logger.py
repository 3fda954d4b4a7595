import logging
import sys

from schedule_lessons.db.models import LogEntry


class DBLogHandler(logging.Handler):
    """Пишет записи лога в таблицу logs отдельной сессией."""

    def __init__(self, session_factory=None):
        super().__init__()
        self._session_factory = session_factory

    def _sessions(self):
        if self._session_factory is None:
            from schedule_lessons.database import SessionLocal

            self._session_factory = SessionLocal
        return self._session_factory

    def emit(self, record):
        # записи самого SQLAlchemy не пишем, иначе рекурсия
        if record.name.startswith("sqlalchemy"):
            return
        session = self._sessions()()
        try:
            session.add(LogEntry(level=record.levelname, message=self.format(record)))
            session.commit()
        except Exception as e:
            session.rollback()
            print("DBLogHandler error:", e, file=sys.stderr)
        finally:
            session.close()
