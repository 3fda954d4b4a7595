import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from schedule_lessons.config import get_settings
from schedule_lessons.logs.db_logger import DBLogHandler

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_initialized = False


def setup_logging():
    global _initialized
    if _initialized:
        return

    settings = get_settings()
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    formatter = logging.Formatter(LOG_FORMAT)

    if not any(type(h) is logging.StreamHandler for h in logger.handlers):
        stream_handler = logging.StreamHandler(sys.stdout)
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)

    log_dir = Path(settings.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)
    if not any(isinstance(h, TimedRotatingFileHandler) for h in logger.handlers):
        file_handler = TimedRotatingFileHandler(
            filename=log_dir / "lessons.log",
            when="midnight",
            interval=1,
            backupCount=7,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if settings.LOG_TO_DB and not any(isinstance(h, DBLogHandler) for h in logger.handlers):
        db_handler = DBLogHandler()
        db_handler.setLevel(logging.INFO)
        db_handler.setFormatter(formatter)
        logger.addHandler(db_handler)

    _initialized = True  # пометка, что уже настроен
