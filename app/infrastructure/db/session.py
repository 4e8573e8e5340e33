"""
Database session management (SQLAlchemy)
"""
import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker, Session

from app.config import get_settings
from app.domain.errors import PersistenceError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    SQLAlchemy declarative base for all ORM models
    """
    pass


# Singleton engine and session factory
_engine = None
_SessionLocal = None


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """
    SQLite по умолчанию не проверяет FOREIGN KEY - включаем PRAGMA на каждое соединение.
    Без этого ON DELETE RESTRICT для transactions.wallet_id не работает.
    """
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def get_engine():
    """Get or create SQLAlchemy engine (singleton)"""
    global _engine
    if _engine is None:
        settings = get_settings()
        url = settings.get_sqlalchemy_url()
        _engine = create_engine(url, pool_pre_ping=True)
        enable_sqlite_foreign_keys(_engine)
    return _engine


def get_session_factory():
    """Get or create session factory (singleton)"""
    global _SessionLocal
    if _SessionLocal is None:
        engine = get_engine()
        _SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    return _SessionLocal


def get_db() -> Session:
    """
    Dependency для FastAPI - создает session и автоматически закрывает

    Usage:
        @app.get("/wallets")
        def list_wallets(db: Session = Depends(get_db)):
            ...
    """
    SessionLocal = get_session_factory()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_connection() -> None:
    """
    Health check - проверка доступности БД

    Raises:
        sqlalchemy.exc.OperationalError: если БД недоступна
    """
    with get_engine().connect() as conn:
        conn.execute(text("SELECT 1"))


@contextmanager
def atomic(db: Session, operation: str):
    """
    Атомарный блок: все изменения в session коммитятся вместе или не коммитятся вовсе

    Любое исключение внутри блока -> rollback + повторный raise.
    Ошибки БД (SQLAlchemyError) заворачиваются в PersistenceError.

    Usage:
        with atomic(self.db, "transaction_created"):
            self.db.add(tx)
            wallet.balance += tx.amount
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"[{operation}] DB error, rolled back: {exc}")
        raise PersistenceError(f"Не удалось сохранить изменения ({operation})") from exc
    except Exception:
        db.rollback()
        logger.error(f"[{operation}] failed, rolled back")
        raise
