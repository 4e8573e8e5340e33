"""
Budget API endpoints

spent вычисляется при чтении из expense-транзакций месяца.
"""
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, StrictInt
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.application.budgets import (
    BudgetQueryService, UpsertBudgetUseCase, UpdateBudgetAmountUseCase, DeleteBudgetUseCase,
)
from app.domain.errors import LedgerValidationError
from app.utils.validation import MAX_MINOR_AMOUNT


router = APIRouter(prefix="/budgets", tags=["budgets"])


class BudgetRequest(BaseModel):
    category_id: str = Field(min_length=1)
    amount: Annotated[StrictInt, Field(gt=0, le=MAX_MINOR_AMOUNT)]
    month: str = Field(pattern=r"^\d{4}-\d{2}$")  # YYYY-MM


class BudgetAmountRequest(BaseModel):
    amount: Annotated[StrictInt, Field(gt=0, le=MAX_MINOR_AMOUNT)]


@router.get("")
def list_budgets(month: str | None = None, db: Session = Depends(get_db)):
    """Бюджеты месяца (?month=YYYY-MM) со spent"""
    if not month:
        raise LedgerValidationError("Не указан месяц", field="month")
    return {"success": True, "data": BudgetQueryService(db).list_for_month(month)}


@router.post("")
def upsert_budget(req: BudgetRequest, db: Session = Depends(get_db)):
    """Установить лимит (повторно для той же категории и месяца - обновить)"""
    budget = UpsertBudgetUseCase(db).execute(
        category_id=req.category_id,
        amount=req.amount,
        month=req.month,
    )
    return {"success": True, "data": BudgetQueryService(db).get(budget.id)}


@router.put("/{budget_id}")
def update_budget(budget_id: str, req: BudgetAmountRequest, db: Session = Depends(get_db)):
    UpdateBudgetAmountUseCase(db).execute(budget_id, req.amount)
    return {"success": True, "data": BudgetQueryService(db).get(budget_id)}


@router.delete("/{budget_id}")
def delete_budget(budget_id: str, db: Session = Depends(get_db)):
    DeleteBudgetUseCase(db).execute(budget_id)
    return {"success": True}
