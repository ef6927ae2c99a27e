"""
Database handle.

One ``Database`` is built at application startup, stored on ``app.state.db``
and disposed at shutdown. Request handlers get a session per request through
``get_db``; the session is closed on every exit path.
"""
import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import Session, sessionmaker

from curriculum.models.base import Base
from curriculum.models import alignment, curriculum, outcome, score, stakeholder, user  # noqa: F401 - register tables

logger = logging.getLogger(__name__)


class Database:
    def __init__(self, url: str, ssl_required: bool = False, echo: bool = False):
        self.url = url
        connect_args: dict = {}
        if url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        elif ssl_required:
            connect_args["sslmode"] = "require"

        self.engine = create_engine(
            url,
            pool_pre_ping=True,
            echo=echo,
            connect_args=connect_args,
        )
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self.SessionLocal = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    def create_all(self):
        Base.metadata.create_all(bind=self.engine)

    def ping(self):
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    @contextmanager
    def session(self) -> Iterator[Session]:
        db = self.SessionLocal()
        try:
            yield db
        finally:
            db.close()

    def dispose(self):
        self.engine.dispose()
        logger.info("Database pool disposed")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_db(request: Request) -> Iterator[Session]:
    database: Database = request.app.state.db
    with database.session() as db:
        yield db
