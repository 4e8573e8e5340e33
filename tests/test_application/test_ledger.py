"""
Tests for LedgerEngine - atomic balance-affecting operations
"""
from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from app.application.goals import CreateGoalUseCase
from app.application.ledger import LedgerEngine
from app.application.wallets import CreateWalletUseCase, ArchiveWalletUseCase
from app.domain.errors import (
    LedgerValidationError, NotFoundError, InsufficientFundsError, PersistenceError,
)
from app.domain.ledger import fold_balance
from app.infrastructure.db.models import Wallet, Transaction, Goal


D = date(2024, 3, 15)


def _wallet(db, name, initial_balance=0):
    return CreateWalletUseCase(db).execute(name=name, currency="IDR", initial_balance=initial_balance)


def _balance(db, wallet_id) -> int:
    return db.get(Wallet, wallet_id).balance


def _history(db, wallet_id):
    return db.query(Transaction).filter(
        (Transaction.wallet_id == wallet_id) | (Transaction.to_wallet_id == wallet_id)
    ).all()


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------

def test_income_increases_balance(db_session, wallet, income_category):
    engine = LedgerEngine(db_session)
    tx = engine.create_transaction(
        type="income", amount=1000, wallet_id=wallet.id, date=D, category_id=income_category.id
    )

    assert tx.id is not None
    assert tx.amount == 1000
    assert _balance(db_session, wallet.id) == 1000


def test_expense_may_go_negative(db_session, wallet):
    """income/expense не проверяют остаток (кредитки уходят в минус)"""
    LedgerEngine(db_session).create_transaction(type="expense", amount=200, wallet_id=wallet.id, date=D)
    assert _balance(db_session, wallet.id) == -200


def test_transfer_scenario(db_session):
    """A=1000, B=500, перевод 300 A->B -> A=700, B=800, одна строка transfer"""
    a = _wallet(db_session, "A", 1000)
    b = _wallet(db_session, "B", 500)

    tx = LedgerEngine(db_session).create_transaction(
        type="transfer", amount=300, wallet_id=a.id, to_wallet_id=b.id, date=D
    )

    assert _balance(db_session, a.id) == 700
    assert _balance(db_session, b.id) == 800

    rows = db_session.query(Transaction).all()
    assert len(rows) == 1
    assert rows[0].id == tx.id
    assert rows[0].type == "transfer"
    assert rows[0].amount == 300
    assert rows[0].wallet_id == a.id
    assert rows[0].to_wallet_id == b.id


def test_create_rejects_invalid_amount(db_session, wallet):
    engine = LedgerEngine(db_session)
    for amount in (0, -5, 12.5):
        with pytest.raises(LedgerValidationError):
            engine.create_transaction(type="expense", amount=amount, wallet_id=wallet.id, date=D)

    assert db_session.query(Transaction).count() == 0
    assert _balance(db_session, wallet.id) == 0


def test_create_transfer_without_destination_rejected(db_session, wallet):
    with pytest.raises(LedgerValidationError) as exc:
        LedgerEngine(db_session).create_transaction(type="transfer", amount=100, wallet_id=wallet.id, date=D)
    assert exc.value.field == "to_wallet_id"


def test_create_unknown_wallet_not_found(db_session):
    with pytest.raises(NotFoundError):
        LedgerEngine(db_session).create_transaction(type="income", amount=100, wallet_id="missing", date=D)


def test_create_unknown_category_not_found(db_session, wallet):
    with pytest.raises(NotFoundError):
        LedgerEngine(db_session).create_transaction(
            type="expense", amount=100, wallet_id=wallet.id, date=D, category_id="missing"
        )
    assert _balance(db_session, wallet.id) == 0


def test_create_on_archived_wallet_rejected(db_session, wallet):
    ArchiveWalletUseCase(db_session).execute(wallet.id)

    with pytest.raises(LedgerValidationError) as exc:
        LedgerEngine(db_session).create_transaction(type="income", amount=100, wallet_id=wallet.id, date=D)
    assert exc.value.field == "wallet_id"


def test_idempotency_key_applies_once(db_session, wallet):
    """Повтор запроса с тем же ключом возвращает ту же транзакцию без второго эффекта"""
    engine = LedgerEngine(db_session)
    first = engine.create_transaction(
        type="expense", amount=250, wallet_id=wallet.id, date=D, idempotency_key="req-1"
    )
    second = engine.create_transaction(
        type="expense", amount=250, wallet_id=wallet.id, date=D, idempotency_key="req-1"
    )

    assert first.id == second.id
    assert db_session.query(Transaction).count() == 1
    assert _balance(db_session, wallet.id) == -250


def test_idempotency_key_reused_with_different_body_rejected(db_session, wallet):
    """Тот же ключ с другой операцией - ошибка, а не молчаливый возврат старой строки"""
    engine = LedgerEngine(db_session)
    engine.create_transaction(type="income", amount=100, wallet_id=wallet.id, date=D, idempotency_key="k1")

    with pytest.raises(LedgerValidationError) as exc:
        engine.create_transaction(type="expense", amount=999, wallet_id=wallet.id, date=D, idempotency_key="k1")

    assert exc.value.field == "idempotency_key"
    assert db_session.query(Transaction).count() == 1
    assert _balance(db_session, wallet.id) == 100


def test_balance_overflow_rejected_and_rolled_back(db_session):
    """Баланс хранится в BIGINT: выход за предел - ошибка валидации, без частичной записи"""
    w = _wallet(db_session, "Big", 2**63 - 10)

    with pytest.raises(LedgerValidationError) as exc:
        LedgerEngine(db_session).create_transaction(type="income", amount=100, wallet_id=w.id, date=D)

    assert exc.value.field == "amount"
    assert _balance(db_session, w.id) == 2**63 - 10
    assert db_session.query(Transaction).count() == 0


def test_transfer_overflow_on_destination_rolls_back_source(db_session):
    a = _wallet(db_session, "A", 1000)
    b = _wallet(db_session, "B", 2**63 - 10)

    with pytest.raises(LedgerValidationError):
        LedgerEngine(db_session).create_transaction(
            type="transfer", amount=100, wallet_id=a.id, to_wallet_id=b.id, date=D
        )

    assert _balance(db_session, a.id) == 1000
    assert _balance(db_session, b.id) == 2**63 - 10
    assert db_session.query(Transaction).count() == 0


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------

def test_edit_expense_scenario(db_session):
    """A=1000, расход 200 (A=800), правка на 500 -> A=500, а не 300"""
    a = _wallet(db_session, "A", 1000)
    engine = LedgerEngine(db_session)

    tx = engine.create_transaction(type="expense", amount=200, wallet_id=a.id, date=D)
    assert _balance(db_session, a.id) == 800

    engine.update_transaction(tx.id, type="expense", amount=500, wallet_id=a.id, date=D)
    assert _balance(db_session, a.id) == 500
    assert db_session.get(Transaction, tx.id).amount == 500


def test_noop_update_leaves_balance_unchanged(db_session, wallet, other_wallet):
    engine = LedgerEngine(db_session)
    tx = engine.create_transaction(
        type="transfer", amount=300, wallet_id=wallet.id, to_wallet_id=other_wallet.id, date=D, note="rent"
    )

    engine.update_transaction(
        tx.id, type="transfer", amount=300, wallet_id=wallet.id, to_wallet_id=other_wallet.id, date=D, note="rent"
    )

    assert _balance(db_session, wallet.id) == -300
    assert _balance(db_session, other_wallet.id) == 300


def test_update_moves_effect_to_another_wallet(db_session, wallet, other_wallet):
    """Реверс по старому кошельку, применение по новому"""
    engine = LedgerEngine(db_session)
    tx = engine.create_transaction(type="income", amount=1000, wallet_id=wallet.id, date=D)

    engine.update_transaction(tx.id, type="expense", amount=400, wallet_id=other_wallet.id, date=D)

    assert _balance(db_session, wallet.id) == 0
    assert _balance(db_session, other_wallet.id) == -400


def test_update_income_to_transfer(db_session, wallet, other_wallet):
    engine = LedgerEngine(db_session)
    tx = engine.create_transaction(type="income", amount=1000, wallet_id=wallet.id, date=D)

    engine.update_transaction(
        tx.id, type="transfer", amount=600, wallet_id=wallet.id, to_wallet_id=other_wallet.id, date=D
    )

    assert _balance(db_session, wallet.id) == -600
    assert _balance(db_session, other_wallet.id) == 600


def test_update_missing_transaction_not_found(db_session, wallet):
    with pytest.raises(NotFoundError):
        LedgerEngine(db_session).update_transaction("missing", type="income", amount=1, wallet_id=wallet.id, date=D)


def test_update_invalid_fields_change_nothing(db_session, wallet):
    engine = LedgerEngine(db_session)
    tx = engine.create_transaction(type="expense", amount=200, wallet_id=wallet.id, date=D)

    with pytest.raises(LedgerValidationError):
        engine.update_transaction(tx.id, type="expense", amount=-1, wallet_id=wallet.id, date=D)

    assert _balance(db_session, wallet.id) == -200
    assert db_session.get(Transaction, tx.id).amount == 200


def test_update_failure_between_reverse_and_apply_is_atomic(db_session, wallet, other_wallet, monkeypatch):
    """Сбой после реверса старого эффекта: состояние полностью старое"""
    engine = LedgerEngine(db_session)
    tx = engine.create_transaction(
        type="transfer", amount=300, wallet_id=wallet.id, to_wallet_id=other_wallet.id, date=D
    )

    original = LedgerEngine._apply_effects
    calls = {"n": 0}

    def crash_on_second_apply(self, effects):
        calls["n"] += 1
        if calls["n"] == 2:
            raise RuntimeError("crash between reversal and apply")
        return original(self, effects)

    monkeypatch.setattr(LedgerEngine, "_apply_effects", crash_on_second_apply)

    with pytest.raises(RuntimeError):
        engine.update_transaction(tx.id, type="expense", amount=999, wallet_id=wallet.id, date=D)

    assert calls["n"] == 2
    assert _balance(db_session, wallet.id) == -300
    assert _balance(db_session, other_wallet.id) == 300
    row = db_session.get(Transaction, tx.id)
    assert row.type == "transfer"
    assert row.amount == 300


def test_database_error_surfaces_as_persistence_error(db_session, wallet, monkeypatch):
    """Ошибка БД посреди записи -> PersistenceError, ни строки, ни баланса"""
    def db_down(self, effects):
        raise OperationalError("UPDATE wallets", {}, Exception("disk I/O error"))

    monkeypatch.setattr(LedgerEngine, "_apply_effects", db_down)

    with pytest.raises(PersistenceError):
        LedgerEngine(db_session).create_transaction(type="income", amount=100, wallet_id=wallet.id, date=D)

    assert db_session.query(Transaction).count() == 0
    assert _balance(db_session, wallet.id) == 0


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------

def test_create_then_delete_round_trip(db_session):
    a = _wallet(db_session, "A", 1000)
    b = _wallet(db_session, "B", 500)
    engine = LedgerEngine(db_session)

    for tx_type, to_wallet in (("income", None), ("expense", None), ("transfer", b.id)):
        tx = engine.create_transaction(type=tx_type, amount=337, wallet_id=a.id, to_wallet_id=to_wallet, date=D)
        engine.delete_transaction(tx.id)

        assert _balance(db_session, a.id) == 1000
        assert _balance(db_session, b.id) == 500

    assert db_session.query(Transaction).count() == 0


def test_delete_missing_transaction_not_found(db_session):
    with pytest.raises(NotFoundError):
        LedgerEngine(db_session).delete_transaction("missing")


def test_delete_on_archived_wallet_still_reverses(db_session, wallet):
    """Архивный кошелёк не принимает новых операций, но старые можно удалить"""
    engine = LedgerEngine(db_session)
    tx = engine.create_transaction(type="income", amount=500, wallet_id=wallet.id, date=D)
    ArchiveWalletUseCase(db_session).execute(wallet.id)

    engine.delete_transaction(tx.id)
    assert _balance(db_session, wallet.id) == 0


def test_note_edit_on_archived_wallet_allowed(db_session, wallet):
    """Правка операции, уже привязанной к архивному кошельку, разрешена"""
    engine = LedgerEngine(db_session)
    tx = engine.create_transaction(type="expense", amount=300, wallet_id=wallet.id, date=D)
    ArchiveWalletUseCase(db_session).execute(wallet.id)

    engine.update_transaction(tx.id, type="expense", amount=300, wallet_id=wallet.id, date=D, note="обед")

    assert db_session.get(Transaction, tx.id).note == "обед"
    assert _balance(db_session, wallet.id) == -300


def test_update_onto_archived_wallet_rejected(db_session, wallet, other_wallet):
    engine = LedgerEngine(db_session)
    tx = engine.create_transaction(type="expense", amount=300, wallet_id=other_wallet.id, date=D)
    ArchiveWalletUseCase(db_session).execute(wallet.id)

    with pytest.raises(LedgerValidationError) as exc:
        engine.update_transaction(
            tx.id, type="transfer", amount=300, wallet_id=other_wallet.id, to_wallet_id=wallet.id, date=D
        )

    assert exc.value.field == "to_wallet_id"
    assert _balance(db_session, other_wallet.id) == -300
    assert _balance(db_session, wallet.id) == 0


def test_balance_matches_history_after_mixed_operations(db_session):
    a = _wallet(db_session, "A", 1000)
    b = _wallet(db_session, "B", -200)
    engine = LedgerEngine(db_session)

    t1 = engine.create_transaction(type="income", amount=5000, wallet_id=a.id, date=D)
    t2 = engine.create_transaction(type="transfer", amount=1200, wallet_id=a.id, to_wallet_id=b.id, date=D)
    t3 = engine.create_transaction(type="expense", amount=300, wallet_id=b.id, date=D)
    engine.update_transaction(t2.id, type="transfer", amount=900, wallet_id=b.id, to_wallet_id=a.id, date=D)
    engine.update_transaction(t1.id, type="expense", amount=50, wallet_id=a.id, date=D)
    engine.delete_transaction(t3.id)
    engine.create_transaction(type="expense", amount=70, wallet_id=b.id, date=D)

    for w in (a, b):
        wallet = db_session.get(Wallet, w.id)
        assert wallet.balance == fold_balance(w.id, _history(db_session, w.id), wallet.initial_balance)

    assert _balance(db_session, a.id) == 1000 - 50 + 900
    assert _balance(db_session, b.id) == -200 - 900 - 70


# ---------------------------------------------------------------------------
# Goal contribution
# ---------------------------------------------------------------------------

def test_goal_contribution_scenario(db_session):
    """
    Цель 1 000 000 / 200 000, кошелёк 150 000:
    взнос 100 000 -> кошелёк 50 000, цель 300 000;
    повторный взнос 100 000 -> InsufficientFunds, без изменений
    """
    w = _wallet(db_session, "Savings", 150000)
    goal = CreateGoalUseCase(db_session).execute(name="Laptop", target_amount=1000000, current_amount=200000)
    engine = LedgerEngine(db_session)

    tx, updated = engine.contribute_to_goal(goal_id=goal.id, amount=100000, wallet_id=w.id, date=D)

    assert _balance(db_session, w.id) == 50000
    assert updated.current_amount == 300000
    assert tx.type == "expense"
    assert tx.amount == 100000
    assert tx.wallet_id == w.id
    assert tx.category_id is None
    assert tx.note == "Contribution to goal: Laptop"

    with pytest.raises(InsufficientFundsError) as exc:
        engine.contribute_to_goal(goal_id=goal.id, amount=100000, wallet_id=w.id, date=D)
    assert exc.value.available == 50000
    assert exc.value.requested == 100000

    assert _balance(db_session, w.id) == 50000
    assert db_session.get(Goal, goal.id).current_amount == 300000
    assert db_session.query(Transaction).count() == 1


def test_contribution_exact_balance_allowed(db_session):
    w = _wallet(db_session, "Cash", 1000)
    goal = CreateGoalUseCase(db_session).execute(name="Trip", target_amount=5000)

    LedgerEngine(db_session).contribute_to_goal(goal_id=goal.id, amount=1000, wallet_id=w.id, date=D)
    assert _balance(db_session, w.id) == 0


def test_contribution_unknown_goal_or_wallet(db_session, wallet):
    goal = CreateGoalUseCase(db_session).execute(name="Trip", target_amount=5000)
    engine = LedgerEngine(db_session)

    with pytest.raises(NotFoundError):
        engine.contribute_to_goal(goal_id="missing", amount=10, wallet_id=wallet.id, date=D)
    with pytest.raises(NotFoundError):
        engine.contribute_to_goal(goal_id=goal.id, amount=10, wallet_id="missing", date=D)


def test_contribution_rejects_non_positive_amount(db_session, wallet):
    goal = CreateGoalUseCase(db_session).execute(name="Trip", target_amount=5000)
    with pytest.raises(LedgerValidationError):
        LedgerEngine(db_session).contribute_to_goal(goal_id=goal.id, amount=0, wallet_id=wallet.id, date=D)


def test_contribution_goal_amount_overflow_rejected(db_session):
    w = _wallet(db_session, "Cash", 1000)
    goal = CreateGoalUseCase(db_session).execute(
        name="Trip", target_amount=2**63 - 1, current_amount=2**63 - 10
    )

    with pytest.raises(LedgerValidationError):
        LedgerEngine(db_session).contribute_to_goal(goal_id=goal.id, amount=100, wallet_id=w.id, date=D)

    assert _balance(db_session, w.id) == 1000
    assert db_session.get(Goal, goal.id).current_amount == 2**63 - 10
    assert db_session.query(Transaction).count() == 0


def test_deleting_contribution_does_not_touch_goal(db_session):
    """Удаление расхода-взноса возвращает деньги в кошелёк, прогресс цели не меняется"""
    w = _wallet(db_session, "Cash", 1000)
    goal = CreateGoalUseCase(db_session).execute(name="Trip", target_amount=5000)
    engine = LedgerEngine(db_session)

    tx, _ = engine.contribute_to_goal(goal_id=goal.id, amount=400, wallet_id=w.id, date=D)
    engine.delete_transaction(tx.id)

    assert _balance(db_session, w.id) == 1000
    assert db_session.get(Goal, goal.id).current_amount == 400
