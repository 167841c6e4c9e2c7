from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional, TypeVar

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger(__name__)

Base = declarative_base()

T = TypeVar("T")


class Database:
    """Database client with an explicit lifecycle.

    The app receives one instance through ``create_app(database=...)`` and
    every request borrows a session from it via :func:`get_db`.
    """

    def __init__(self, url: str, **engine_kwargs: Any) -> None:
        self.url = url
        self._engine_kwargs = engine_kwargs
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database is not open")
        return self._engine

    def open(self) -> None:
        if self._engine is not None:
            return
        kwargs = dict(self._engine_kwargs)
        if self.is_sqlite:
            connect_args = kwargs.setdefault("connect_args", {})
            connect_args.setdefault("check_same_thread", False)
        else:
            kwargs.setdefault("pool_pre_ping", True)
        self._engine = create_engine(self.url, **kwargs)
        self._session_factory = sessionmaker(bind=self._engine, autoflush=False, expire_on_commit=False)
        logger.info("database opened dialect=%s", self._engine.dialect.name)

    def close(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("database closed")

    def session(self) -> Session:
        if self._session_factory is None:
            raise RuntimeError("Database is not open")
        return self._session_factory()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Standalone unit of work for scripts: commit on success, rollback on error."""
        db = self.session()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def create_all(self) -> None:
        import coffee_ops.models  # noqa: F401  registers every table on Base.metadata

        Base.metadata.create_all(bind=self.engine)

    def ping(self) -> bool:
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except (SQLAlchemyError, RuntimeError):
            logger.exception("database ping failed")
            return False
        return True


def with_transaction(db: Session, work: Callable[[Session], T]) -> T:
    """Run ``work`` as one unit: commit when it returns, roll back and re-raise when it fails."""
    try:
        result = work(db)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return result


def get_db(request: Request) -> Iterator[Session]:
    database: Database = request.app.state.database
    db = database.session()
    try:
        yield db
    finally:
        db.close()
