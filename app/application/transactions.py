"""
Transactions feed - read side of the ledger

Запись (создание / правка / удаление) - только через LedgerEngine.
"""
from typing import Dict, Any, List

from sqlalchemy import or_
from sqlalchemy.orm import Session, aliased

from app.domain.errors import LedgerValidationError, NotFoundError
from app.infrastructure.db.models import Transaction, Category, Wallet
from app.utils.validation import is_valid_month, month_bounds


def serialize_transaction(tx: Transaction) -> Dict[str, Any]:
    return {
        "id": tx.id,
        "type": tx.type,
        "amount": tx.amount,
        "category_id": tx.category_id,
        "wallet_id": tx.wallet_id,
        "to_wallet_id": tx.to_wallet_id,
        "date": tx.date,
        "note": tx.note,
    }


class TransactionsFeedService:
    """Лента операций с именами категорий и кошельков"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, transaction_id: str) -> Transaction:
        tx = self.db.get(Transaction, transaction_id)
        if not tx:
            raise NotFoundError("Операция не найдена")
        return tx

    def list_recent(
        self,
        limit: int = 100,
        offset: int = 0,
        wallet_id: str | None = None,
        month: str | None = None,
    ) -> List[Dict[str, Any]]:
        """
        Последние операции: по дате (desc), затем по времени создания (desc)

        Args:
            limit: Максимум строк
            offset: Смещение
            wallet_id: Только операции, затрагивающие кошелёк (включая входящие переводы)
            month: Только операции месяца YYYY-MM
        """
        to_wallet = aliased(Wallet)

        query = (
            self.db.query(
                Transaction,
                Category.name,
                Category.icon,
                Category.color,
                Wallet.name,
                to_wallet.name,
            )
            .outerjoin(Category, Transaction.category_id == Category.id)
            .join(Wallet, Transaction.wallet_id == Wallet.id)
            .outerjoin(to_wallet, Transaction.to_wallet_id == to_wallet.id)
        )

        if wallet_id:
            query = query.filter(
                or_(Transaction.wallet_id == wallet_id, Transaction.to_wallet_id == wallet_id)
            )
        if month:
            if not is_valid_month(month):
                raise LedgerValidationError("Месяц должен быть в формате YYYY-MM", field="month")
            start, end = month_bounds(month)
            query = query.filter(Transaction.date >= start, Transaction.date < end)

        rows = (
            query.order_by(Transaction.date.desc(), Transaction.created_at.desc())
            .limit(limit)
            .offset(offset)
            .all()
        )

        result = []
        for tx, cat_name, cat_icon, cat_color, wallet_name, to_wallet_name in rows:
            item = serialize_transaction(tx)
            item.update({
                "category_name": cat_name,
                "category_icon": cat_icon,
                "category_color": cat_color,
                "wallet_name": wallet_name,
                "to_wallet_name": to_wallet_name,
            })
            result.append(item)
        return result
