"""
Stats service: расходы по категориям за текущий месяц или год
"""
from datetime import date
from typing import Any, Dict, List, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.domain.transaction import TX_TYPE_EXPENSE
from app.infrastructure.db.models import Category, Transaction
from app.utils.validation import month_bounds

PERIOD_MONTH = "Month"
PERIOD_YEAR = "Year"


def period_bounds(period: str, today: date) -> Tuple[date, date]:
    """
    [начало, конец) периода, содержащего today

    Year - календарный год, любой другой период (Day, Week, Month) - месяц.
    """
    if period == PERIOD_YEAR:
        return date(today.year, 1, 1), date(today.year + 1, 1, 1)
    return month_bounds(f"{today.year:04d}-{today.month:02d}")


class StatsService:
    """Статистика для экрана аналитики. Только чтение."""

    def __init__(self, db: Session):
        self.db = db

    def expense_by_category(self, period: str = PERIOD_MONTH, today: date | None = None) -> List[Dict[str, Any]]:
        """
        Сумма расходов по категориям, от большей к меньшей

        Расходы без категории (в т.ч. взносы в цели) не попадают в разбивку.
        """
        start, end = period_bounds(period, today or date.today())

        total = func.sum(Transaction.amount).label("value")
        rows = (
            self.db.query(Category.id, Category.name, Category.color, Category.icon, total)
            .select_from(Transaction)
            .join(Category, Transaction.category_id == Category.id)
            .filter(
                Transaction.type == TX_TYPE_EXPENSE,
                Transaction.date >= start,
                Transaction.date < end,
            )
            .group_by(Category.id, Category.name, Category.color, Category.icon)
            .order_by(total.desc(), Category.name)
            .all()
        )

        return [
            {
                "category_id": category_id,
                "name": name,
                "color": color,
                "icon": icon,
                "value": int(value or 0),
            }
            for category_id, name, color, icon, value in rows
        ]
