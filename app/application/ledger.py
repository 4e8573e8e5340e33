"""
Ledger Engine - every balance-affecting mutation goes through here

Инвариант: wallet.balance == wallet.initial_balance + Σ(транзакции кошелька).

Каждая операция (создание / редактирование / удаление транзакции, взнос в цель)
пишет строку транзакции и все изменения балансов одной атомарной единицей:
либо всё, либо ничего.

Политика средств: income/expense/transfer не проверяют остаток - баланс может
уйти в минус (кредитки). Проверка остатка есть только у взноса в цель.

Конкурентные запросы к одному кошельку не блокируются (один пользователь на
леджер) - при гонке побеждает последняя запись в БД.
"""
import logging
import uuid
from datetime import date
from typing import Dict

from sqlalchemy.orm import Session

from app.domain.errors import (
    LedgerValidationError, NotFoundError, InsufficientFundsError,
)
from app.domain.ledger import balance_effects, reverse_effects
from app.domain.transaction import TransactionDraft, TX_TYPE_EXPENSE
from app.infrastructure.db.models import Wallet, Category, Transaction, Goal
from app.infrastructure.db.session import atomic
from app.utils.validation import is_minor_amount, fits_bigint

logger = logging.getLogger(__name__)

GOAL_CONTRIBUTION_NOTE = "Contribution to goal: {name}"


class LedgerEngine:
    """
    Атомарные операции леджера

    Session передаётся явно - никаких глобальных хранилищ.

    Usage:
        engine = LedgerEngine(db)
        tx = engine.create_transaction(type="expense", amount=200, wallet_id=..., date=...)
        engine.update_transaction(tx.id, type="expense", amount=500, wallet_id=..., date=...)
        engine.delete_transaction(tx.id)
    """

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create_transaction(
        self,
        type: str,
        amount: int,
        wallet_id: str,
        date: date,
        to_wallet_id: str | None = None,
        category_id: str | None = None,
        note: str | None = None,
        idempotency_key: str | None = None,
    ) -> Transaction:
        """
        Создать транзакцию и применить её к балансам

        Args:
            type: income / expense / transfer
            amount: Сумма (положительное целое, минимальные единицы)
            wallet_id: Кошелёк (для transfer - источник)
            date: Дата операции
            to_wallet_id: Кошелёк-получатель (только transfer)
            category_id: Категория (опционально)
            note: Заметка
            idempotency_key: Ключ идемпотентности запроса (опционально)

        Returns:
            Созданная транзакция (или ранее созданная с тем же ключом)

        Raises:
            LedgerValidationError: некорректные поля или ключ уже занят другой операцией
            NotFoundError: кошелёк или категория не найдены
            PersistenceError: запись в БД не удалась (ничего не изменено)
        """
        draft = TransactionDraft(
            type=type,
            amount=amount,
            wallet_id=wallet_id,
            date=date,
            to_wallet_id=to_wallet_id,
            category_id=category_id,
            note=note,
        ).normalized()

        if idempotency_key:
            existing = self.db.query(Transaction).filter(
                Transaction.idempotency_key == idempotency_key
            ).first()
            if existing:
                if TransactionDraft.from_row(existing) != draft:
                    raise LedgerValidationError(
                        "Ключ идемпотентности уже использован для другой операции",
                        field="idempotency_key",
                    )
                logger.info(f"[ledger] idempotent replay key={idempotency_key} -> tx {existing.id}")
                return existing

        draft.validate()
        self._check_references(draft)

        effects = balance_effects(draft)

        with atomic(self.db, "transaction_created"):
            tx = self._insert_row(draft, idempotency_key=idempotency_key)
            self._apply_effects(effects)

        logger.info(f"[ledger] created {tx.type} {tx.id} amount={tx.amount} effects={effects}")
        return tx

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def update_transaction(
        self,
        transaction_id: str,
        type: str,
        amount: int,
        wallet_id: str,
        date: date,
        to_wallet_id: str | None = None,
        category_id: str | None = None,
        note: str | None = None,
    ) -> Transaction:
        """
        Отредактировать транзакцию

        1. Реверс старого эффекта (по СТАРЫМ кошелькам)
        2. Применение нового эффекта (по НОВЫМ кошелькам)
        3. Перезапись строки транзакции

        Все три шага - одна атомарная единица. Итог для кошелька:
        balance + (new_effect - old_effect).

        Raises:
            NotFoundError: транзакция / кошелёк / категория не найдены
            LedgerValidationError: некорректные новые поля
        """
        tx = self.db.get(Transaction, transaction_id)
        if not tx:
            raise NotFoundError("Операция не найдена")

        old = TransactionDraft.from_row(tx)
        new = TransactionDraft(
            type=type,
            amount=amount,
            wallet_id=wallet_id,
            date=date,
            to_wallet_id=to_wallet_id,
            category_id=category_id,
            note=note,
        ).normalized().validate()
        self._check_references(new, previous=old)

        old_effects = balance_effects(old)
        new_effects = balance_effects(new)

        with atomic(self.db, "transaction_updated"):
            self._apply_effects(reverse_effects(old_effects))
            self._apply_effects(new_effects)
            self._overwrite_row(tx, new)

        logger.info(
            f"[ledger] updated {tx.id}: reversed={reverse_effects(old_effects)} applied={new_effects}"
        )
        return tx

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    def delete_transaction(self, transaction_id: str) -> None:
        """
        Удалить транзакцию и откатить её эффект на балансах

        Raises:
            NotFoundError: транзакция не найдена
        """
        tx = self.db.get(Transaction, transaction_id)
        if not tx:
            raise NotFoundError("Операция не найдена")

        effects = reverse_effects(balance_effects(tx))

        with atomic(self.db, "transaction_deleted"):
            self._apply_effects(effects)
            self.db.delete(tx)

        logger.info(f"[ledger] deleted {transaction_id} reversed={effects}")

    # ------------------------------------------------------------------
    # Goal contribution
    # ------------------------------------------------------------------

    def contribute_to_goal(
        self,
        goal_id: str,
        amount: int,
        wallet_id: str,
        date: date,
    ) -> tuple[Transaction, Goal]:
        """
        Взнос в цель: расход из кошелька + рост current_amount цели

        Единственный путь с проверкой остатка: wallet.balance >= amount.
        Расход записывается без категории с заметкой о цели.

        Returns:
            (созданная транзакция, обновлённая цель)

        Raises:
            NotFoundError: цель или кошелёк не найдены
            LedgerValidationError: некорректная сумма / архивный кошелёк
            InsufficientFundsError: в кошельке меньше amount
        """
        if not is_minor_amount(amount) or amount <= 0:
            raise LedgerValidationError("Сумма взноса должна быть положительным целым числом", field="amount")

        goal = self.db.get(Goal, goal_id)
        if not goal:
            raise NotFoundError("Цель не найдена")

        wallet = self.db.get(Wallet, wallet_id)
        if not wallet:
            raise NotFoundError("Кошелёк не найден")
        if wallet.is_archived:
            raise LedgerValidationError("Нельзя создавать операции с архивированным кошельком", field="wallet_id")

        if wallet.balance < amount:
            raise InsufficientFundsError(
                "Недостаточно средств в кошельке",
                available=wallet.balance,
                requested=amount,
            )
        if not fits_bigint(goal.current_amount + amount):
            raise LedgerValidationError("Накопленная сумма цели вышла за допустимый диапазон", field="amount")

        draft = TransactionDraft(
            type=TX_TYPE_EXPENSE,
            amount=amount,
            wallet_id=wallet_id,
            date=date,
            note=GOAL_CONTRIBUTION_NOTE.format(name=goal.name),
        ).validate()

        with atomic(self.db, "goal_contribution"):
            tx = self._insert_row(draft)
            self._apply_effects(balance_effects(draft))
            goal.current_amount += amount

        logger.info(f"[ledger] goal {goal.id} +{amount} from wallet {wallet_id} (tx {tx.id})")
        return tx, goal

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_references(self, draft: TransactionDraft, previous: TransactionDraft | None = None) -> None:
        """
        Кошельки и категория существуют; на архивные кошельки новых эффектов нет

        При редактировании (previous) архивный кошелёк, который уже был в
        транзакции, допускается: правка заметки или суммы не переносит
        операцию на новый кошелёк.
        """
        kept = {previous.wallet_id, previous.to_wallet_id} if previous else set()
        for field, wallet_id in (("wallet_id", draft.wallet_id), ("to_wallet_id", draft.to_wallet_id)):
            if wallet_id is None:
                continue
            wallet = self.db.get(Wallet, wallet_id)
            if not wallet:
                raise NotFoundError(f"Кошелёк {wallet_id} не найден")
            if wallet.is_archived and wallet_id not in kept:
                raise LedgerValidationError(
                    "Нельзя создавать операции с архивированным кошельком", field=field
                )

        if draft.category_id is not None:
            if not self.db.get(Category, draft.category_id):
                raise NotFoundError(f"Категория {draft.category_id} не найдена")

    def _apply_effects(self, effects: Dict[str, int]) -> None:
        """Применить дельты к балансам (внутри atomic-блока)"""
        for wallet_id, delta in effects.items():
            wallet = self.db.get(Wallet, wallet_id)
            if not wallet:
                raise NotFoundError(f"Кошелёк {wallet_id} не найден")
            if not fits_bigint(wallet.balance + delta):
                raise LedgerValidationError(
                    f"Баланс кошелька {wallet.name} вышел за допустимый диапазон", field="amount"
                )
            wallet.balance += delta
        self.db.flush()

    def _insert_row(self, draft: TransactionDraft, idempotency_key: str | None = None) -> Transaction:
        tx = Transaction(
            id=str(uuid.uuid4()),
            type=draft.type,
            amount=draft.amount,
            wallet_id=draft.wallet_id,
            to_wallet_id=draft.to_wallet_id,
            category_id=draft.category_id,
            date=draft.date,
            note=draft.note,
            idempotency_key=idempotency_key,
        )
        self.db.add(tx)
        self.db.flush()
        return tx

    def _overwrite_row(self, tx: Transaction, draft: TransactionDraft) -> None:
        tx.type = draft.type
        tx.amount = draft.amount
        tx.wallet_id = draft.wallet_id
        tx.to_wallet_id = draft.to_wallet_id
        tx.category_id = draft.category_id
        tx.date = draft.date
        tx.note = draft.note
        self.db.flush()
