"""
SQLAlchemy ORM models (ledger tables)

Все денежные суммы - целые числа в минимальных единицах валюты (копейки, центы, рупии).
"""
from datetime import date as date_type, datetime
from sqlalchemy import (
    String, Text, Date, Boolean, BigInteger, TIMESTAMP, ForeignKey,
    CheckConstraint, UniqueConstraint, Index, func, false,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.db.session import Base


class Wallet(Base):
    """
    Кошелёк. balance - кэш, выводимый из истории транзакций.

    Меняется только через LedgerEngine (и ReconcileWalletUseCase при ремонте).
    """
    __tablename__ = "wallets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(32), nullable=False, server_default="other")  # bank, cash, ewallet, credit, savings, other
    currency: Mapped[str] = mapped_column(String(3), nullable=False, server_default="IDR")

    initial_balance: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0, server_default="0")
    balance: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0, server_default="0")

    color: Mapped[str | None] = mapped_column(String(32), nullable=True)
    icon: Mapped[str | None] = mapped_column(String(64), nullable=True)
    is_archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )


class Category(Base):
    """Категория доходов/расходов"""
    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)  # income, expense
    icon: Mapped[str | None] = mapped_column(String(64), nullable=True)
    color: Mapped[str | None] = mapped_column(String(32), nullable=True)
    group: Mapped[str] = mapped_column(String(20), nullable=False, server_default="wants")  # needs, wants, savings

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )


class Transaction(Base):
    """
    Транзакция - source of truth для балансов кошельков.

    amount всегда положительный, направление задаёт type:
    - income: + wallet_id
    - expense: - wallet_id
    - transfer: - wallet_id, + to_wallet_id
    """
    __tablename__ = "transactions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)

    category_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("categories.id", ondelete="RESTRICT"), nullable=True
    )
    wallet_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("wallets.id", ondelete="RESTRICT"), nullable=False
    )
    to_wallet_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("wallets.id", ondelete="RESTRICT"), nullable=True
    )

    date: Mapped[date_type] = mapped_column(Date, nullable=False)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Ключ идемпотентности запроса (заголовок Idempotency-Key)
    idempotency_key: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transactions_amount_positive"),
        CheckConstraint("type IN ('income', 'expense', 'transfer')", name="ck_transactions_type"),
        Index("ix_transactions_wallet_id", "wallet_id"),
        Index("ix_transactions_to_wallet_id", "to_wallet_id"),
        Index("ix_transactions_category_date", "category_id", "date"),
        Index("ix_transactions_date", "date"),
    )


class Budget(Base):
    """
    Лимит расходов по категории на месяц.

    spent не хранится - считается при чтении из expense-транзакций.
    """
    __tablename__ = "budgets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    category_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("categories.id", ondelete="CASCADE"), nullable=False
    )
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    month: Mapped[str] = mapped_column(String(7), nullable=False)  # YYYY-MM

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    __table_args__ = (
        UniqueConstraint("category_id", "month", name="uq_budget_category_month"),
    )


class Goal(Base):
    """Цель накопления. current_amount меняется взносами (contribute), не выводится."""
    __tablename__ = "goals"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    target_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    current_amount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0, server_default="0")
    deadline: Mapped[date_type | None] = mapped_column(Date, nullable=True)
    color: Mapped[str | None] = mapped_column(String(32), nullable=True)
    icon: Mapped[str | None] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )
