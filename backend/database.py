import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from models import Base

logger = logging.getLogger(__name__)


class Database:
    """Engine and session factory for the question store."""

    def __init__(self, database_url: str) -> None:
        self._database_url = database_url
        self._engine: Optional[Engine] = None
        self._sessionmaker: Optional[sessionmaker] = None

    @property
    def url(self) -> str:
        return self._database_url

    def init(self) -> None:
        """Create the engine if needed, then ensure tables exist."""
        if self._engine is None:
            connect_args = {}
            if self._database_url.startswith("sqlite"):
                connect_args["check_same_thread"] = False
            self._engine = create_engine(
                self._database_url,
                pool_pre_ping=True,
                connect_args=connect_args,
            )

            if self._database_url.startswith("sqlite"):

                @event.listens_for(self._engine, "connect")
                def _set_sqlite_pragma(dbapi_connection, connection_record):  # pragma: no cover
                    cursor = dbapi_connection.cursor()
                    cursor.execute("PRAGMA foreign_keys=ON")
                    cursor.close()

            self._sessionmaker = sessionmaker(
                bind=self._engine,
                autoflush=False,
                expire_on_commit=False,
            )

        with self._engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        Base.metadata.create_all(bind=self._engine)
        logger.info("Database initialized, tables ensured")

    def dispose(self) -> None:
        if self._engine is not None:
            logger.info("Disposing database engine")
            self._engine.dispose()
            self._engine = None
            self._sessionmaker = None

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a session; commit on success and roll back on errors."""
        if self._sessionmaker is None:
            raise RuntimeError("Database is not initialized. Call init() first.")
        s: Session = self._sessionmaker()
        try:
            yield s
            s.commit()
        except Exception:
            s.rollback()
            raise
        finally:
            s.close()
