"""
Reconciliation - repair drift between cached wallet balance and transaction history

История транзакций - всегда source of truth. Сверка только переписывает
кэш wallet.balance и никогда не добавляет компенсирующие транзакции.
"""
import logging
from dataclasses import dataclass
from typing import List, Set

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.domain.errors import NotFoundError
from app.domain.ledger import fold_balance, SYSTEM_RECONCILIATION_NOTE
from app.infrastructure.db.models import Wallet, Transaction
from app.infrastructure.db.session import atomic
from app.utils.money import format_money

logger = logging.getLogger(__name__)


@dataclass
class ReconcileReport:
    """Результат сверки одного кошелька"""
    wallet_id: str
    previous_balance: int
    calculated_balance: int
    removed_synthetic: int = 0

    @property
    def corrected(self) -> bool:
        return self.previous_balance != self.calculated_balance

    @property
    def drift(self) -> int:
        return self.previous_balance - self.calculated_balance


class ReconcileWalletUseCase:
    """
    Use case: Сверить баланс кошелька с историей

    Процесс:
    1. Удалить синтетические "System Balance Reconciliation" транзакции
       (наследие старой сверки, раздувавшей историю)
    2. Пересчитать баланс: initial_balance + fold(транзакции)
    3. Если расходится - переписать wallet.balance

    Идемпотентно: повторный запуск без новых транзакций ничего не меняет.
    """

    def __init__(self, db: Session):
        self.db = db

    def execute(self, wallet_id: str) -> ReconcileReport:
        """
        Сверить один кошелёк

        Если удалённая синтетическая транзакция была переводом, второй кошелёк
        перевода тоже пересчитывается в той же атомарной единице.

        Raises:
            NotFoundError: кошелёк не найден
        """
        wallet = self.db.get(Wallet, wallet_id)
        if not wallet:
            raise NotFoundError("Кошелёк не найден")

        with atomic(self.db, "wallet_reconciled"):
            removed, touched = self._purge_synthetic(wallet_id)
            report = self._reconcile(wallet)
            report.removed_synthetic = removed
            for other_id in touched - {wallet_id}:
                other = self.db.get(Wallet, other_id)
                if other:
                    self._reconcile(other)

        return report

    def execute_all(self) -> List[ReconcileReport]:
        """Сверить все кошельки (включая архивные) одной атомарной единицей"""
        with atomic(self.db, "wallets_reconciled"):
            removed, _ = self._purge_synthetic(None)
            wallets = self.db.query(Wallet).order_by(Wallet.created_at.asc(), Wallet.id.asc()).all()
            reports = [self._reconcile(wallet) for wallet in wallets]

        if removed:
            logger.warning(f"[reconcile] removed {removed} synthetic reconciliation transactions")
        return reports

    def _purge_synthetic(self, wallet_id: str | None) -> tuple[int, Set[str]]:
        """Удалить синтетические транзакции; вернуть (количество, затронутые кошельки)"""
        query = self.db.query(Transaction).filter(Transaction.note == SYSTEM_RECONCILIATION_NOTE)
        if wallet_id is not None:
            query = query.filter(
                or_(Transaction.wallet_id == wallet_id, Transaction.to_wallet_id == wallet_id)
            )

        touched: Set[str] = set()
        synthetic = query.all()
        for tx in synthetic:
            touched.add(tx.wallet_id)
            if tx.to_wallet_id:
                touched.add(tx.to_wallet_id)
            self.db.delete(tx)

        if synthetic:
            self.db.flush()
            logger.warning(f"[reconcile] cleaning up {len(synthetic)} system transactions")

        return len(synthetic), touched

    def _reconcile(self, wallet: Wallet) -> ReconcileReport:
        history = self.db.query(Transaction).filter(
            or_(Transaction.wallet_id == wallet.id, Transaction.to_wallet_id == wallet.id)
        ).all()

        calculated = fold_balance(wallet.id, history, opening_balance=wallet.initial_balance)
        report = ReconcileReport(
            wallet_id=wallet.id,
            previous_balance=wallet.balance,
            calculated_balance=calculated,
        )

        if report.corrected:
            logger.warning(
                f"[reconcile] correcting {wallet.name}: "
                f"was {format_money(wallet.balance, wallet.currency)}, "
                f"now {format_money(calculated, wallet.currency)}"
            )
            wallet.balance = calculated
            self.db.flush()

        return report
