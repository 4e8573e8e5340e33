"""
Dashboard API endpoint
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.application.dashboard import DashboardService


router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("")
def get_dashboard(db: Session = Depends(get_db)):
    """Общий баланс, доходы/расходы месяца, график за 6 месяцев"""
    return {"success": True, "data": DashboardService(db).get_summary()}
