import os
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)

Base = declarative_base()

DATABASE_URL = ""
engine = None
_configured_database_url = None


def _get_database_url() -> str:
    return os.getenv("DATABASE_URL", "postgresql://localhost/membership")


def _engine_kwargs(database_url: str) -> dict:
    # TestClient serves requests from a worker thread.
    if make_url(database_url).drivername.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


def configure_database() -> None:
    global DATABASE_URL, engine, _configured_database_url

    database_url = _get_database_url()

    if engine is not None and _configured_database_url == database_url:
        return

    engine = create_engine(database_url, **_engine_kwargs(database_url))
    SessionLocal.configure(bind=engine)
    DATABASE_URL = database_url
    _configured_database_url = database_url


configure_database()


@contextmanager
def session_scope(db: Optional[Session] = None) -> Iterator[Session]:
    """
    If db is provided, the caller owns the transaction: nothing is committed
    or closed here. Otherwise a session is opened, committed on success,
    rolled back on any exception and closed.
    """
    owns_db = db is None
    if owns_db:
        db = SessionLocal()

    try:
        yield db
        if owns_db:
            db.commit()
    except Exception:
        if owns_db:
            db.rollback()
        raise
    finally:
        if owns_db:
            db.close()
