"""
Pytest fixtures for testing
"""
from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from app.infrastructure.db.session import Base, enable_sqlite_foreign_keys
from app.application.wallets import CreateWalletUseCase
from app.application.categories import CreateCategoryUseCase


@pytest.fixture
def db_engine():
    """
    In-memory SQLite engine for tests

    StaticPool: одно соединение на все сессии (и на потоки TestClient),
    иначе каждая сессия видела бы свою пустую :memory: базу.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, autoflush=False)


@pytest.fixture
def db_session(session_factory) -> Session:
    """Create database session for tests"""
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def today():
    return date(2024, 3, 15)


@pytest.fixture
def wallet(db_session):
    """Основной кошелёк с нулевым начальным балансом"""
    return CreateWalletUseCase(db_session).execute(name="BCA", currency="IDR", type="bank")


@pytest.fixture
def other_wallet(db_session):
    """Второй кошелёк (для переводов)"""
    return CreateWalletUseCase(db_session).execute(name="Cash", currency="IDR", type="cash")


@pytest.fixture
def expense_category(db_session):
    return CreateCategoryUseCase(db_session).execute(name="Food", type="expense", group="needs")


@pytest.fixture
def income_category(db_session):
    return CreateCategoryUseCase(db_session).execute(name="Salary", type="income")
