import logging
import subprocess
from datetime import date
from typing import List, Optional

import typer

from schedule_lessons.config import get_settings
from schedule_lessons.database import init_db
from schedule_lessons.errors import ValidationError
from schedule_lessons.logs.logger_setup import setup_logging
from schedule_lessons.services.normalizer import parse_recurrence_request
from schedule_lessons.services.recurrence import generate

# Настройка логирования
setup_logging()
logger = logging.getLogger("cli_logger")

# Typer-приложение
app = typer.Typer()


def _split_days(days: str) -> List[str]:
    return [d.strip() for d in days.split(",") if d.strip()]


@app.command("init-db")
def init_db_command():
    """
    Создает таблицы по моделям (без Alembic).
    """
    logger.info("Команда init-db")
    init_db()
    typer.echo("Таблицы созданы.")


@app.command()
def migrate():
    """
    Применяет все доступные миграции Alembic.
    """
    logger.info("Выполнение миграций Alembic")
    subprocess.run(["alembic", "upgrade", "head"], check=True)
    logger.info("Миграции применены.")


@app.command()
def serve(host: str = "0.0.0.0", port: int = 3000):
    """
    Запускает HTTP API.
    """
    import uvicorn

    logger.info(f"Запуск API на {host}:{port}")
    uvicorn.run("schedule_lessons.api:app", host=host, port=port)


@app.command()
def preview(
    first_date: str = typer.Argument(..., help="Дата начала серии, YYYY-MM-DD"),
    days: str = typer.Option(..., "--days", help="Дни недели через запятую, 0 - воскресенье"),
    count: Optional[int] = typer.Option(None, "--count", help="Количество занятий"),
    last_date: Optional[str] = typer.Option(None, "--last-date", help="Дата окончания, YYYY-MM-DD"),
):
    """
    Показывает даты серии, которые были бы созданы, ничего не записывая в БД.
    """
    raw = {
        "title": "preview",
        "days": _split_days(days),
        "firstDate": first_date,
        "lessonsCount": count,
        "lastDate": last_date,
    }
    try:
        series = parse_recurrence_request(raw)
    except ValidationError as e:
        typer.echo(f"Ошибка: {e}", err=True)
        raise typer.Exit(code=2)

    dates: List[date] = generate(
        series.first_date,
        series.days,
        lessons_count=series.lessons_count,
        last_date=series.last_date,
        lessons_max=series.limits.lessons_max,
        interval_max=series.limits.interval_max,
    )
    if not dates:
        typer.echo("Нет подходящих дат.")
        return
    for day in dates:
        typer.echo(day.isoformat())
    logger.info(f"preview: {len(dates)} дат, ограничение {get_settings().LESSONS_MAX}")


def main():
    app()


if __name__ == "__main__":
    main()
