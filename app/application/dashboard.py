"""
Dashboard service: total balance + monthly income/expense + 6-month series
"""
import calendar
from datetime import date
from typing import Dict, Any, List, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.domain.transaction import TX_TYPE_INCOME, TX_TYPE_EXPENSE
from app.infrastructure.db.models import Wallet, Transaction
from app.utils.validation import month_bounds

CHART_MONTHS = 6


def _month_key(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def _last_months(today: date, count: int) -> List[Tuple[int, int]]:
    """(year, month) за последние count месяцев, от старого к текущему"""
    result = []
    y, m = today.year, today.month
    for _ in range(count):
        result.append((y, m))
        m -= 1
        if m == 0:
            m = 12
            y -= 1
    return list(reversed(result))


class DashboardService:
    """Сводка для главной страницы. Только чтение."""

    def __init__(self, db: Session):
        self.db = db

    def get_summary(self, today: date | None = None) -> Dict[str, Any]:
        today = today or date.today()

        total_balance = self.db.query(func.coalesce(func.sum(Wallet.balance), 0)).filter(
            Wallet.is_archived == False
        ).scalar()

        chart_data = []
        for y, m in _last_months(today, CHART_MONTHS):
            income, expense = self._month_totals(_month_key(y, m))
            chart_data.append({
                "name": calendar.month_abbr[m],
                "income": income,
                "expense": expense,
                "full_date": _month_key(y, m),
            })

        current = chart_data[-1]
        return {
            "total_balance": int(total_balance or 0),
            "monthly_income": current["income"],
            "monthly_expense": current["expense"],
            "chart_data": chart_data,
        }

    def _month_totals(self, month: str) -> Tuple[int, int]:
        start, end = month_bounds(month)
        rows = (
            self.db.query(Transaction.type, func.sum(Transaction.amount))
            .filter(
                Transaction.type.in_([TX_TYPE_INCOME, TX_TYPE_EXPENSE]),
                Transaction.date >= start,
                Transaction.date < end,
            )
            .group_by(Transaction.type)
            .all()
        )
        totals = {tx_type: int(total or 0) for tx_type, total in rows}
        return totals.get(TX_TYPE_INCOME, 0), totals.get(TX_TYPE_EXPENSE, 0)
