"""
Tests for Wallet use cases
"""
from datetime import date

import pytest

from app.application.ledger import LedgerEngine
from app.application.wallets import (
    CreateWalletUseCase, UpdateWalletUseCase, ArchiveWalletUseCase, WalletValidationError,
)
from app.domain.errors import NotFoundError
from app.infrastructure.db.models import Wallet


def test_create_wallet_with_default_type(db_session):
    """Создание кошелька с типом по умолчанию"""
    wallet = CreateWalletUseCase(db_session).execute(name="Наличные", currency="IDR")

    stored = db_session.get(Wallet, wallet.id)
    assert stored.type == "other"
    assert stored.balance == 0
    assert stored.initial_balance == 0
    assert stored.is_archived is False


def test_create_credit_wallet_with_negative_balance(db_session):
    wallet = CreateWalletUseCase(db_session).execute(
        name="Кредитная карта", currency="IDR", type="credit", initial_balance=-15000
    )
    assert wallet.balance == -15000
    assert wallet.initial_balance == -15000


@pytest.mark.parametrize("fields,field", [
    ({"name": "  ", "currency": "IDR"}, "name"),
    ({"name": "X", "currency": "rupiah"}, "currency"),
    ({"name": "X", "currency": "IDR", "type": "REGULAR"}, "type"),
    ({"name": "X", "currency": "IDR", "initial_balance": 10.5}, "initial_balance"),
])
def test_create_wallet_validation(db_session, fields, field):
    with pytest.raises(WalletValidationError) as exc:
        CreateWalletUseCase(db_session).execute(**fields)
    assert exc.value.field == field
    assert db_session.query(Wallet).count() == 0


def test_update_wallet_does_not_touch_balance(db_session, wallet):
    LedgerEngine(db_session).create_transaction(
        type="income", amount=500, wallet_id=wallet.id, date=date(2024, 1, 1)
    )

    updated = UpdateWalletUseCase(db_session).execute(wallet.id, name="BCA Main", color="#00f", balance=1)

    assert updated.name == "BCA Main"
    assert updated.color == "#00f"
    assert updated.balance == 500


def test_update_unknown_wallet(db_session):
    with pytest.raises(NotFoundError):
        UpdateWalletUseCase(db_session).execute("missing", name="X")


def test_archive_wallet(db_session, wallet):
    ArchiveWalletUseCase(db_session).execute(wallet.id)
    assert db_session.get(Wallet, wallet.id).is_archived is True

    # повторная архивация - no-op
    ArchiveWalletUseCase(db_session).execute(wallet.id)
    assert db_session.get(Wallet, wallet.id).is_archived is True
