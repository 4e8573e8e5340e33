"""
Goal API endpoints
"""
from datetime import date as date_type
from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.api.v1.transactions import TransactionResponse
from app.application.goals import (
    CreateGoalUseCase, UpdateGoalUseCase, DeleteGoalUseCase, get_goal_or_404, list_goals,
)
from app.application.ledger import LedgerEngine
from app.utils.validation import blank_to_none, parse_date, MAX_MINOR_AMOUNT


router = APIRouter(prefix="/goals", tags=["goals"])


# === Request models ===

class GoalRequest(BaseModel):
    name: str = Field(min_length=1)
    target_amount: Annotated[StrictInt, Field(gt=0, le=MAX_MINOR_AMOUNT)]
    current_amount: Annotated[StrictInt, Field(ge=0, le=MAX_MINOR_AMOUNT)] = 0
    deadline: date_type | None = None
    color: str | None = None
    icon: str | None = None

    @field_validator("deadline", mode="before")
    @classmethod
    def parse_deadline(cls, v):
        v = blank_to_none(v)
        return None if v is None else parse_date(v)


class ContributeRequest(BaseModel):
    amount: Annotated[StrictInt, Field(gt=0, le=MAX_MINOR_AMOUNT)]
    wallet_id: str = Field(min_length=1)  # Кошелёк, из которого списываются средства
    date: date_type

    @field_validator("date", mode="before")
    @classmethod
    def parse_contribution_date(cls, v):
        return parse_date(v)


class GoalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    target_amount: int
    current_amount: int
    deadline: date_type | None = None
    color: str | None = None
    icon: str | None = None


# === Endpoints ===

@router.get("")
def get_goals(db: Session = Depends(get_db)):
    return {"success": True, "data": [GoalResponse.model_validate(g) for g in list_goals(db)]}


@router.get("/{goal_id}")
def get_goal(goal_id: str, db: Session = Depends(get_db)):
    return {"success": True, "data": GoalResponse.model_validate(get_goal_or_404(db, goal_id))}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_goal(req: GoalRequest, db: Session = Depends(get_db)):
    goal = CreateGoalUseCase(db).execute(**req.model_dump())
    return {"success": True, "data": GoalResponse.model_validate(goal)}


@router.put("/{goal_id}")
def update_goal(goal_id: str, req: GoalRequest, db: Session = Depends(get_db)):
    goal = UpdateGoalUseCase(db).execute(goal_id, **req.model_dump())
    return {"success": True, "data": GoalResponse.model_validate(goal)}


@router.delete("/{goal_id}")
def delete_goal(goal_id: str, db: Session = Depends(get_db)):
    DeleteGoalUseCase(db).execute(goal_id)
    return {"success": True}


@router.post("/{goal_id}/contribute")
def contribute(goal_id: str, req: ContributeRequest, db: Session = Depends(get_db)):
    """
    Взнос в цель: расход из кошелька + рост прогресса цели (атомарно)

    404 - цель/кошелёк не найдены, 400 - недостаточно средств
    """
    tx, goal = LedgerEngine(db).contribute_to_goal(
        goal_id=goal_id,
        amount=req.amount,
        wallet_id=req.wallet_id,
        date=req.date,
    )
    return {
        "success": True,
        "data": {
            "transaction": TransactionResponse.model_validate(tx),
            "goal": GoalResponse.model_validate(goal),
        },
    }
