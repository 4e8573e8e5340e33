"""
Budget use cases + spent aggregation

Лимит хранится, "spent" - нет: считается при чтении как сумма
expense-транзакций категории за месяц. Балансы здесь не меняются.
"""
import uuid
from typing import Dict, Any, List

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.domain.errors import LedgerValidationError, NotFoundError
from app.domain.transaction import TX_TYPE_EXPENSE
from app.infrastructure.db.models import Budget, Category, Transaction
from app.infrastructure.db.session import atomic
from app.utils.validation import is_minor_amount, is_valid_month, month_bounds


class BudgetValidationError(LedgerValidationError):
    """Ошибка валидации бюджета"""
    pass


def _validate_amount(amount) -> None:
    if not is_minor_amount(amount) or amount <= 0:
        raise BudgetValidationError("Лимит бюджета должен быть положительным целым числом", field="amount")


def _validate_month(month: str) -> None:
    if not is_valid_month(month):
        raise BudgetValidationError("Месяц должен быть в формате YYYY-MM", field="month")


class BudgetQueryService:
    """Бюджеты месяца с вычисленным spent"""

    def __init__(self, db: Session):
        self.db = db

    def spent(self, category_id: str, month: str) -> int:
        """Сумма расходов категории за месяц"""
        start, end = month_bounds(month)
        total = self.db.query(func.coalesce(func.sum(Transaction.amount), 0)).filter(
            Transaction.category_id == category_id,
            Transaction.type == TX_TYPE_EXPENSE,
            Transaction.date >= start,
            Transaction.date < end,
        ).scalar()
        return int(total or 0)

    def list_for_month(self, month: str) -> List[Dict[str, Any]]:
        """
        Все бюджеты месяца

        Returns:
            [{id, category_id, category_name, category_icon, category_color,
              amount, month, spent, remaining}]
        """
        _validate_month(month)
        start, end = month_bounds(month)

        spent_by_category = dict(
            self.db.query(Transaction.category_id, func.sum(Transaction.amount))
            .filter(
                Transaction.type == TX_TYPE_EXPENSE,
                Transaction.category_id.isnot(None),
                Transaction.date >= start,
                Transaction.date < end,
            )
            .group_by(Transaction.category_id)
            .all()
        )

        rows = (
            self.db.query(Budget, Category)
            .join(Category, Budget.category_id == Category.id)
            .filter(Budget.month == month)
            .order_by(Category.name.asc())
            .all()
        )

        return [
            self._serialize(budget, category, int(spent_by_category.get(budget.category_id) or 0))
            for budget, category in rows
        ]

    def get(self, budget_id: str) -> Dict[str, Any]:
        row = (
            self.db.query(Budget, Category)
            .join(Category, Budget.category_id == Category.id)
            .filter(Budget.id == budget_id)
            .first()
        )
        if not row:
            raise NotFoundError("Бюджет не найден")
        budget, category = row
        return self._serialize(budget, category, self.spent(budget.category_id, budget.month))

    @staticmethod
    def _serialize(budget: Budget, category: Category, spent: int) -> Dict[str, Any]:
        return {
            "id": budget.id,
            "category_id": budget.category_id,
            "category_name": category.name,
            "category_icon": category.icon,
            "category_color": category.color,
            "amount": budget.amount,
            "month": budget.month,
            "spent": spent,
            "remaining": budget.amount - spent,
        }


class UpsertBudgetUseCase:
    """
    Use case: Установить лимит категории на месяц

    Уникальность (category_id, month): повторная установка обновляет amount.
    """

    def __init__(self, db: Session):
        self.db = db

    def execute(self, category_id: str, amount: int, month: str) -> Budget:
        _validate_amount(amount)
        _validate_month(month)
        if not self.db.get(Category, category_id):
            raise NotFoundError("Категория не найдена")

        budget = self.db.query(Budget).filter(
            Budget.category_id == category_id,
            Budget.month == month,
        ).first()

        with atomic(self.db, "budget_set"):
            if budget:
                budget.amount = amount
            else:
                budget = Budget(
                    id=str(uuid.uuid4()),
                    category_id=category_id,
                    amount=amount,
                    month=month,
                )
                self.db.add(budget)

        return budget


class UpdateBudgetAmountUseCase:
    """Use case: Изменить лимит существующего бюджета"""

    def __init__(self, db: Session):
        self.db = db

    def execute(self, budget_id: str, amount: int) -> Budget:
        _validate_amount(amount)
        budget = self.db.get(Budget, budget_id)
        if not budget:
            raise NotFoundError("Бюджет не найден")

        with atomic(self.db, "budget_updated"):
            budget.amount = amount
        return budget


class DeleteBudgetUseCase:
    """Use case: Удалить бюджет"""

    def __init__(self, db: Session):
        self.db = db

    def execute(self, budget_id: str) -> None:
        budget = self.db.get(Budget, budget_id)
        if not budget:
            raise NotFoundError("Бюджет не найден")

        with atomic(self.db, "budget_deleted"):
            self.db.delete(budget)
