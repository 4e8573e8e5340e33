"""
Transaction domain entity - validated draft of a ledger operation
"""
from datetime import date
from dataclasses import dataclass, replace
from typing import Optional

from app.domain.errors import LedgerValidationError
from app.utils.validation import is_minor_amount, MAX_MINOR_AMOUNT

# Transaction types
TX_TYPE_INCOME = "income"
TX_TYPE_EXPENSE = "expense"
TX_TYPE_TRANSFER = "transfer"

TX_TYPES = (TX_TYPE_INCOME, TX_TYPE_EXPENSE, TX_TYPE_TRANSFER)


@dataclass(frozen=True)
class TransactionDraft:
    """
    Поля транзакции до записи в БД

    Используется LedgerEngine для обоих сторон редактирования:
    старая версия (из строки БД) и новая (из запроса).

    Правила:
    - amount: положительное целое (минимальные единицы валюты)
    - transfer: to_wallet_id обязателен и отличается от wallet_id
    - income/expense: to_wallet_id отсутствует
    """
    type: str
    amount: int
    wallet_id: str
    date: date
    to_wallet_id: Optional[str] = None
    category_id: Optional[str] = None
    note: Optional[str] = None

    def validate(self) -> "TransactionDraft":
        """
        Проверить инварианты транзакции

        Returns:
            self (для цепочек вида TransactionDraft(...).validate())

        Raises:
            LedgerValidationError: если поле некорректно
        """
        if self.type not in TX_TYPES:
            raise LedgerValidationError(
                f"Неверный тип операции: {self.type}. Используйте income, expense или transfer",
                field="type",
            )

        if isinstance(self.amount, int) and not isinstance(self.amount, bool) and self.amount > MAX_MINOR_AMOUNT:
            raise LedgerValidationError("Сумма превышает допустимый максимум", field="amount")
        if not is_minor_amount(self.amount):
            raise LedgerValidationError("Сумма должна быть целым числом", field="amount")
        if self.amount <= 0:
            raise LedgerValidationError("Сумма операции должна быть больше нуля", field="amount")

        if not self.wallet_id:
            raise LedgerValidationError("Не указан кошелёк", field="wallet_id")

        if not isinstance(self.date, date):
            raise LedgerValidationError("Не указана дата операции", field="date")

        if self.type == TX_TYPE_TRANSFER:
            if not self.to_wallet_id:
                raise LedgerValidationError(
                    "Для перевода необходимо указать кошелёк-получатель", field="to_wallet_id"
                )
            if self.to_wallet_id == self.wallet_id:
                raise LedgerValidationError(
                    "Нельзя перевести средства в тот же кошелёк", field="to_wallet_id"
                )
        elif self.to_wallet_id:
            raise LedgerValidationError(
                "Кошелёк-получатель указывается только для перевода", field="to_wallet_id"
            )

        return self

    def normalized(self) -> "TransactionDraft":
        """Пустые строки -> None (формы присылают "" вместо отсутствующего поля)"""
        return replace(
            self,
            to_wallet_id=self.to_wallet_id or None,
            category_id=self.category_id or None,
            note=self.note or None,
        )

    @classmethod
    def from_row(cls, row) -> "TransactionDraft":
        """Снимок сохранённой транзакции (ORM-строки)"""
        return cls(
            type=row.type,
            amount=row.amount,
            wallet_id=row.wallet_id,
            date=row.date,
            to_wallet_id=row.to_wallet_id,
            category_id=row.category_id,
            note=row.note,
        )
