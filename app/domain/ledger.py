"""
Ledger effects - how a transaction moves wallet balances

Чистые функции без доступа к БД. Используются:
- LedgerEngine: дельты при создании / редактировании / удалении
- ReconcileWalletUseCase: пересчёт баланса из истории (fold)
"""
from typing import Dict, Iterable

from app.domain.errors import LedgerValidationError
from app.domain.transaction import TX_TYPE_INCOME, TX_TYPE_EXPENSE, TX_TYPE_TRANSFER

# Заметка синтетических транзакций, которые старый сервис сверки добавлял в историю.
# Они дублируют суммы и удаляются перед пересчётом.
SYSTEM_RECONCILIATION_NOTE = "System Balance Reconciliation"


def balance_effects(tx) -> Dict[str, int]:
    """
    Дельты балансов для транзакции

    Args:
        tx: объект с полями type, amount, wallet_id, to_wallet_id
            (TransactionDraft или ORM Transaction)

    Returns:
        {wallet_id: delta}

    Example:
        >>> balance_effects(TransactionDraft(type="transfer", amount=300, wallet_id="A", to_wallet_id="B", ...))
        {"A": -300, "B": 300}
    """
    if tx.type == TX_TYPE_INCOME:
        return {tx.wallet_id: tx.amount}

    if tx.type == TX_TYPE_EXPENSE:
        return {tx.wallet_id: -tx.amount}

    if tx.type == TX_TYPE_TRANSFER:
        if not tx.to_wallet_id:
            raise LedgerValidationError(
                "Для перевода необходимо указать кошелёк-получатель", field="to_wallet_id"
            )
        return merge_effects(
            {tx.wallet_id: -tx.amount},
            {tx.to_wallet_id: tx.amount},
        )

    raise LedgerValidationError(f"Неверный тип операции: {tx.type}", field="type")


def reverse_effects(effects: Dict[str, int]) -> Dict[str, int]:
    """Точная инверсия: income вычитается, expense возвращается, ноги перевода меняют знак"""
    return {wallet_id: -delta for wallet_id, delta in effects.items()}


def merge_effects(*effects: Dict[str, int]) -> Dict[str, int]:
    """Сложить дельты по кошелькам (нулевые дельты сохраняются - кошелёк всё равно затронут)"""
    merged: Dict[str, int] = {}
    for effect in effects:
        for wallet_id, delta in effect.items():
            merged[wallet_id] = merged.get(wallet_id, 0) + delta
    return merged


def fold_balance(wallet_id: str, transactions: Iterable, opening_balance: int = 0) -> int:
    """
    Баланс кошелька, выведенный из истории

    income (+) / expense (-) / transfer (-) по wallet_id,
    transfer (+) по to_wallet_id.

    Args:
        wallet_id: ID кошелька
        transactions: транзакции (лишние, не касающиеся кошелька, игнорируются)
        opening_balance: начальный баланс кошелька

    Returns:
        Рассчитанный баланс
    """
    balance = opening_balance
    for tx in transactions:
        if tx.wallet_id == wallet_id:
            if tx.type == TX_TYPE_INCOME:
                balance += tx.amount
            elif tx.type in (TX_TYPE_EXPENSE, TX_TYPE_TRANSFER):
                balance -= tx.amount
        if tx.type == TX_TYPE_TRANSFER and tx.to_wallet_id == wallet_id:
            balance += tx.amount
    return balance
