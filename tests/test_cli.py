from typer.testing import CliRunner

from schedule_lessons.cli.main import app

runner = CliRunner()


def test_preview_until_last_date():
    result = runner.invoke(app, ["preview", "2024-03-01", "--days", "5", "--last-date", "2024-03-22"])

    assert result.exit_code == 0
    assert result.output.split() == ["2024-03-01", "2024-03-08", "2024-03-15", "2024-03-22"]


def test_preview_by_count():
    result = runner.invoke(app, ["preview", "2024-03-04", "--days", "1,3", "--count", "3"])

    assert result.exit_code == 0
    assert result.output.split() == ["2024-03-04", "2024-03-06", "2024-03-11"]


def test_preview_requires_exactly_one_bound():
    result = runner.invoke(app, ["preview", "2024-03-04", "--days", "1", "--count", "3", "--last-date", "2024-04-01"])
    assert result.exit_code == 2


def test_preview_without_matching_days():
    result = runner.invoke(app, ["preview", "2024-03-05", "--days", "0", "--last-date", "2024-03-09"])

    assert result.exit_code == 0
    assert "Нет подходящих дат" in result.output


def test_init_db_creates_tables():
    result = runner.invoke(app, ["init-db"])
    assert result.exit_code == 0
