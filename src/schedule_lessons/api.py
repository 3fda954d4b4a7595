import asyncio
import logging
import threading
from typing import Any, List

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from schedule_lessons.database import get_db
from schedule_lessons.dto.models import LessonOut
from schedule_lessons.errors import (
    MediaTypeError,
    QueryError,
    RequestCancelled,
    ValidationError,
    WriteError,
)
from schedule_lessons.logs.logger_setup import setup_logging
from schedule_lessons.services.lesson_query import list_lessons
from schedule_lessons.services.lesson_writer import schedule_series
from schedule_lessons.services.normalizer import parse_list_filters, parse_recurrence_request

setup_logging()
logger = logging.getLogger(__name__)

DISCONNECT_POLL_SECONDS = 0.1

app = FastAPI(title="schedule-lessons")


def require_json(request: Request) -> None:
    """Запросы без Content-Type: application/json отклоняются до разбора тела."""
    content_type = request.headers.get("content-type")
    media_type = (content_type or "").split(";")[0].strip().lower()
    if media_type == "application/json":
        return
    if media_type.startswith("application/") and media_type.endswith("+json"):
        return
    raise MediaTypeError(content_type)


lessons_router = APIRouter(dependencies=[Depends(require_json)], tags=["lessons"])


async def _read_json(request: Request) -> Any:
    body = await request.body()
    if not body.strip():
        return {}
    try:
        return await request.json()
    except ValueError:
        raise ValidationError("body", "malformed JSON") from None


async def _watch_disconnect(request: Request, cancelled: threading.Event) -> None:
    while not cancelled.is_set():
        if await request.is_disconnected():
            logger.warning("Клиент отключился, транзакция будет отменена")
            cancelled.set()
            return
        await asyncio.sleep(DISCONNECT_POLL_SECONDS)


@app.get("/healthz", include_in_schema=False)
def healthcheck():
    return {"status": "ok"}


@lessons_router.api_route("/", methods=["GET", "POST"], response_model=List[LessonOut])
async def list_lessons_route(request: Request, db: Session = Depends(get_db)):
    filters = parse_list_filters(await _read_json(request))
    return await run_in_threadpool(list_lessons, db, filters)


@lessons_router.post("/lessons", response_model=List[int])
async def create_lessons_route(request: Request, db: Session = Depends(get_db)):
    series = parse_recurrence_request(await _read_json(request))

    cancelled = threading.Event()
    watcher = asyncio.create_task(_watch_disconnect(request, cancelled))
    try:
        return await run_in_threadpool(schedule_series, db, series, cancelled.is_set)
    finally:
        cancelled.set()
        watcher.cancel()


# Обработка ошибок: 4xx - ошибка клиента, 5xx - ошибка хранилища.
# Детали ошибок БД пишутся в лог и клиенту не отдаются.
@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    logger.warning(f"Некорректный запрос {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=400,
        content={"error": "validation_error", "field": exc.field, "detail": exc.reason},
    )


@app.exception_handler(MediaTypeError)
async def media_type_error_handler(request: Request, exc: MediaTypeError):
    logger.warning(f"Отклонен запрос {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=415, content={"error": "unsupported_media_type"})


@app.exception_handler(WriteError)
async def write_error_handler(request: Request, exc: WriteError):
    if exc.conflict:
        return JSONResponse(status_code=409, content={"error": "write_conflict"})
    return JSONResponse(status_code=500, content={"error": "write_failed"})


@app.exception_handler(QueryError)
async def query_error_handler(request: Request, exc: QueryError):
    return JSONResponse(status_code=500, content={"error": "query_failed"})


@app.exception_handler(RequestCancelled)
async def cancelled_handler(request: Request, exc: RequestCancelled):
    logger.warning(f"Запрос {request.url.path} отменен: {exc}")
    return JSONResponse(status_code=499, content={"error": "client_closed_request"})


app.include_router(lessons_router)
