import os
_default_test_secret = "test-jwt-secret-for-pytest-only-0000000000000000"
if len(os.environ.get("JWT_SECRET", "")) < 32:
    os.environ["JWT_SECRET"] = _default_test_secret
os.environ.setdefault("ENV", "test")

from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy.engine import make_url

PROJECT_ROOT = Path(__file__).resolve().parents[2]

TEST_DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{PROJECT_ROOT / 'membership_test.db'}")
os.environ["DATABASE_URL"] = TEST_DATABASE_URL

from membership import database
from membership import models  # noqa: F401


def _reset_sqlite_file(database_url: str) -> None:
    url = make_url(database_url)
    if not url.drivername.startswith("sqlite") or not url.database or url.database == ":memory:":
        return
    path = Path(url.database)
    if path.exists():
        path.unlink()


@pytest.fixture(scope="session", autouse=True)
def _prepare_test_database():
    _reset_sqlite_file(TEST_DATABASE_URL)

    config = Config(str(PROJECT_ROOT / "alembic.ini"))
    config.set_main_option("sqlalchemy.url", TEST_DATABASE_URL)
    command.upgrade(config, "head")

    database.configure_database()
    yield
    database.engine.dispose()


def _clear_tables() -> None:
    with database.engine.begin() as conn:
        for table in reversed(database.Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture(scope="function", autouse=True)
def _clear_tables_between_tests():
    _clear_tables()
    yield
    _clear_tables()
