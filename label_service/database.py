"""
Ledger storage: SQLite engine, transactional scope and the process-wide store handle.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from label_service.config import settings
from label_service.errors import PersistenceError
from label_service.logger import get_logger
from label_service.models.ledger import Base

logger = get_logger(__name__)


class LabelStore:
    """
    Handle on the durable ledger file.

    Every write transaction opened through this store starts with BEGIN
    IMMEDIATE, so the write lock is held before the allocator reads the
    current maximum. Two allocations can therefore never compute the same
    next number. Read-only queries go through `read_session()`, which starts
    a deferred transaction and does not wait behind writers.
    """

    def __init__(self, db_path: str | Path, busy_timeout: float = 30.0):
        self.db_path = Path(db_path)
        self.engine: Engine = create_engine(
            f"sqlite:///{self.db_path}",
            connect_args={"check_same_thread": False, "timeout": busy_timeout},
            future=True,
        )
        self._install_transaction_hooks(self.engine)
        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False, future=True)
        self.ReadSessionLocal = sessionmaker(
            bind=self.engine.execution_options(ledger_read_only=True),
            expire_on_commit=False,
            future=True
        )

    @staticmethod
    def _install_transaction_hooks(engine: Engine) -> None:
        @event.listens_for(engine, "connect")
        def _disable_driver_transactions(dbapi_connection, connection_record):
            # pysqlite would otherwise emit its own deferred BEGIN
            dbapi_connection.isolation_level = None

        @event.listens_for(engine, "begin")
        def _begin(conn):
            if conn.get_execution_options().get("ledger_read_only"):
                conn.exec_driver_sql("BEGIN")
            else:
                conn.exec_driver_sql("BEGIN IMMEDIATE")

    def ensure_tables_exist(self) -> None:
        """Create the labels table if it does not already exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise PersistenceError(
                "Failed to initialize label ledger",
                details={"db_path": str(self.db_path), "error": str(e)}
            ) from e

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Provide a transactional scope: commit on success, roll back on any error."""
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @contextmanager
    def read_session(self) -> Iterator[Session]:
        """Session for queries that never write; closing it rolls the read transaction back."""
        session = self.ReadSessionLocal()
        try:
            yield session
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()


# Global store instance
_store: Optional[LabelStore] = None


def get_store() -> LabelStore:
    """
    Get the process-wide ledger store, creating it on first use.

    Only the allocator receives this handle; geometry and rendering never do.

    Returns:
        LabelStore bound to settings.db_path
    """
    global _store

    if _store is None:
        _store = LabelStore(settings.db_path, busy_timeout=settings.db_busy_timeout_seconds)
        _store.ensure_tables_exist()
        logger.info("Label ledger opened", extra={"db_path": settings.db_path})

    return _store


def close_store() -> None:
    """Dispose the process-wide store (used on shutdown)."""
    global _store

    if _store is not None:
        _store.dispose()
        _store = None
