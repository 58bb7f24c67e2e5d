"""
SQLAlchemy database connection for the `sql` storage backend.

PostgreSQL URLs go through psycopg2; SQLite URLs are accepted for local
development and tests.
"""
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from pantrychef.config.settings import settings
from pantrychef.exceptions import StorageUnavailable

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """SQLAlchemy engine + session factory with a lazily created engine."""

    def __init__(self, database_url: Optional[str] = None):
        self.database_url = database_url or settings.database_url
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    def _initialize_engine(self) -> None:
        if not self.database_url:
            raise StorageUnavailable("DATABASE_URL not configured")

        kwargs = {"pool_pre_ping": True}
        if self.database_url.startswith("sqlite"):
            kwargs = {"connect_args": {"check_same_thread": False}}
            if self.database_url in ("sqlite://", "sqlite:///:memory:"):
                # one shared connection, otherwise every checkout sees an empty db
                kwargs["poolclass"] = StaticPool

        self._engine = create_engine(self.database_url, **kwargs)
        if self._engine.dialect.name == "sqlite":
            event.listen(self._engine, "connect", _enable_sqlite_foreign_keys)
        self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        logger.info("SQLAlchemy engine created (dialect=%s)", self._engine.dialect.name)

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._initialize_engine()
        return self._engine

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Transactional scope: commit on success, rollback on error."""
        if self._session_factory is None:
            self._initialize_engine()
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_schema(self) -> None:
        from pantrychef.models import Base

        Base.metadata.create_all(bind=self.engine)
        logger.info("Database tables created")

    def health_check(self) -> bool:
        if not self.database_url:
            logger.debug("Database health_check: DATABASE_URL not configured")
            return False
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception as exc:
            logger.exception("Database health_check failed: %s", exc)
            return False


# Global database manager instance
db_manager = DatabaseManager()
