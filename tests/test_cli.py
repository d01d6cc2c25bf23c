"""Tests for hifz CLI commands."""

import asyncio
from pathlib import Path
from unittest.mock import patch

from typer.testing import CliRunner

from conftest import make_new_loo7, make_new_student
from hifz.cli.commands import app
from hifz.db.sqlite_store import SQLiteStore

runner = CliRunner()


class TestDateCommands:
    """Tests for next-date and reschedule."""

    def test_next_date_skips_friday(self):
        result = runner.invoke(app, ["next-date", "--today", "2024-03-14"])
        assert result.exit_code == 0
        assert "2024-03-16" in result.output

    def test_next_date_invalid(self):
        result = runner.invoke(app, ["next-date", "--today", "14/03/2024"])
        assert result.exit_code == 1

    def test_reschedule(self):
        result = runner.invoke(app, ["reschedule", "2024-03-10"])
        assert result.exit_code == 0
        assert "2024-03-11" in result.output

    def test_reschedule_invalid(self):
        result = runner.invoke(app, ["reschedule", "never"])
        assert result.exit_code == 1


class TestDailyCommand:
    """Tests for hifz daily."""

    def test_daily_empty(self):
        result = runner.invoke(app, ["daily", "2024-03-10"])
        assert result.exit_code == 0
        assert "No loo7s" in result.output

    def test_daily_table(self):
        """Reads the configured SQLite store for the default owner."""
        store = SQLiteStore(Path("data/hifz.db"))

        async def seed():
            student = await store.create_student(make_new_student("Ahmad"), "default")
            await store.create_loo7(make_new_loo7(student.id), "default")

        asyncio.run(seed())

        result = runner.invoke(app, ["daily", "2024-03-10"])

        assert result.exit_code == 0
        assert "Ahmad" in result.output

    def test_daily_bad_date(self):
        result = runner.invoke(app, ["daily", "10-03-2024"])
        assert result.exit_code == 1


class TestInitDb:
    """Tests for hifz init-db."""

    def test_init_db_creates_file(self, tmp_path):
        db_path = tmp_path / "custom" / "hifz.db"
        result = runner.invoke(app, ["init-db", "--path", str(db_path)])
        assert result.exit_code == 0
        assert db_path.exists()


class TestServe:
    """Tests for hifz serve."""

    def test_serve_uses_config(self):
        with patch("uvicorn.run") as mock_run:
            result = runner.invoke(app, ["serve", "--port", "9001"])

        assert result.exit_code == 0
        args, kwargs = mock_run.call_args
        assert args[0] == "hifz.web.api:create_app"
        assert kwargs["factory"] is True
        assert kwargs["port"] == 9001
        assert kwargs["host"] == "127.0.0.1"
