from __future__ import annotations

import os
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

DEFAULT_DB_URL = "sqlite:///data/curalink.db"

# One engine per URL so every store in the process shares a pool.
_engines: Dict[str, Engine] = {}


def get_db_url() -> str:
    return os.getenv("CURALINK_DB_URL", "").strip() or DEFAULT_DB_URL


def _ensure_sqlite_dir(db_url: str) -> None:
    if not db_url.startswith("sqlite:///"):
        return
    raw_path = db_url[len("sqlite:///") :]
    if not raw_path or raw_path == ":memory:":
        return
    Path(raw_path).parent.mkdir(parents=True, exist_ok=True)


def _enable_sqlite_fk(dbapi_connection, _record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine(db_url: Optional[str] = None) -> Engine:
    url = db_url or get_db_url()
    engine = _engines.get(url)
    if engine is not None:
        return engine

    _ensure_sqlite_dir(url)
    kwargs = {"future": True, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
    engine = create_engine(url, **kwargs)
    if url.startswith("sqlite"):
        event.listen(engine, "connect", _enable_sqlite_fk)
    _engines[url] = engine
    return engine


class SessionProvider:
    """Owns a sessionmaker bound to the engine for *db_url*."""

    def __init__(self, db_url: Optional[str] = None):
        self.db_url = db_url or get_db_url()
        self.engine = get_engine(self.db_url)
        self._factory = sessionmaker(bind=self.engine, expire_on_commit=False, future=True)

    @contextmanager
    def session(self) -> Iterator[Session]:
        session = self._factory()
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
