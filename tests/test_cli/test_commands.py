"""Tests for CLI commands."""

import asyncio
import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from typer.testing import CliRunner

from slotwise.cli.commands import app
from slotwise.config import get_settings
from slotwise.core.database import _get_engine, get_session_factory
from tests.conftest import OWNER, at, book, enqueue, make_service, make_staff


runner = CliRunner()


@pytest.fixture
def db_url(tmp_path, monkeypatch):
    """Point the CLI at a fresh SQLite file."""
    url = f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    get_settings.cache_clear()
    get_session_factory.cache_clear()
    _get_engine.cache_clear()
    result = runner.invoke(app, ["init-db"])
    assert result.exit_code == 0
    yield url
    get_settings.cache_clear()


def _seed(url, work):
    async def runner_():
        engine = create_async_engine(url)
        factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        try:
            async with factory() as session:
                return await work(session)
        finally:
            await engine.dispose()

    return asyncio.run(runner_())


class TestVersionCommand:
    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "slotwise v" in result.stdout


class TestInitDbCommand:
    def test_init_db(self, db_url):
        result = runner.invoke(app, ["init-db"])
        assert result.exit_code == 0
        assert "Database initialized" in result.stdout


class TestWaitingCommand:
    def test_empty_queue(self, db_url):
        result = runner.invoke(app, ["waiting", "--owner", OWNER])
        assert result.exit_code == 0
        assert "Waiting queue is empty" in result.stdout

    def test_lists_queue(self, db_url):
        async def work(session):
            service = await make_service(session, name="Checkup")
            await enqueue(session, service, at(9), "Rafi")

        _seed(db_url, work)

        result = runner.invoke(app, ["waiting", "-o", OWNER])
        assert result.exit_code == 0
        assert "Rafi" in result.stdout
        assert "Checkup" in result.stdout


class TestAssignCommand:
    def test_invalid_staff_id(self, db_url):
        result = runner.invoke(app, ["assign", "--owner", OWNER, "--staff", "nope"])
        assert result.exit_code == 1
        assert "Invalid staff id" in result.stdout

    def test_unknown_staff(self, db_url):
        result = runner.invoke(app, ["assign", "--owner", OWNER, "--staff", str(uuid.uuid4())])
        assert result.exit_code == 1
        assert "NotFound" in result.stdout

    def test_assigns_and_records_activity(self, db_url):
        async def work(session):
            service = await make_service(session)
            staff = await make_staff(session, "Dr. Nabila", capacity=3)
            await book(session, staff, service, at(9))
            await enqueue(session, service, at(9, 10), "Rafi")
            return staff.id

        staff_id = _seed(db_url, work)

        result = runner.invoke(app, ["assign", "--owner", OWNER, "--staff", str(staff_id)])
        assert result.exit_code == 0
        assert "Assigned earliest eligible appointment" in result.stdout
        assert "Rafi" in result.stdout

        activity = runner.invoke(app, ["activity", "--owner", OWNER])
        assert activity.exit_code == 0
        assert "QUEUE_ASSIGNED" in activity.stdout


class TestActivityCommand:
    def test_no_activity(self, db_url):
        result = runner.invoke(app, ["activity", "--owner", OWNER, "-n", "5"])
        assert result.exit_code == 0
        assert "No activity recorded" in result.stdout
