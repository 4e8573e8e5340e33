"""
Stats API endpoint
"""
from typing import Literal

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.application.stats import StatsService


router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("")
def get_stats(
    period: Literal["Day", "Week", "Month", "Year"] = "Month",
    db: Session = Depends(get_db),
):
    """Расходы по категориям за текущий месяц (Year - за текущий год)"""
    return {
        "success": True,
        "data": {"expense_by_category": StatsService(db).expense_by_category(period)},
    }
