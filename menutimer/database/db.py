"""SQLite connection for the preference table.

One engine and one session factory per process.  They are built on
first use against the on-disk database, or explicitly with
``configure_engine`` (tests pass ``sqlite:///:memory:``).
"""

from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session as OrmSession

from ..settings import APP_SUPPORT_DIR
from .models import Base

DB_PATH = APP_SUPPORT_DIR / "menutimer.db"

_engine: Engine | None = None
_sessions: sessionmaker | None = None


def configure_engine(url: str | None = None) -> Engine:
    """Bind the module to *url*, or to ``DB_PATH`` when omitted.

    Replaces any previous binding; sessions opened afterwards use the
    new database.
    """
    global _engine, _sessions
    if url is None:
        DB_PATH.parent.mkdir(parents=True, exist_ok=True)
        url = f"sqlite:///{DB_PATH}"
    _engine = create_engine(url, connect_args={"check_same_thread": False})
    _sessions = sessionmaker(bind=_engine, expire_on_commit=False)
    return _engine


def _bound() -> sessionmaker:
    if _sessions is None:
        configure_engine()
    return _sessions


def init_db() -> None:
    """Create the ``preferences`` table if it is missing."""
    _bound()
    Base.metadata.create_all(_engine)


@contextmanager
def get_session():
    """Yield a session that commits on exit and rolls back on error."""
    session: OrmSession = _bound()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
