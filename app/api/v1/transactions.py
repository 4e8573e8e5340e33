"""
Transaction API endpoints

Создание / правка / удаление идут через LedgerEngine - строка транзакции и
балансы кошельков меняются одной атомарной единицей.
"""
from datetime import date as date_type
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Header, status
from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.application.ledger import LedgerEngine
from app.application.transactions import TransactionsFeedService
from app.config import get_settings
from app.utils.validation import blank_to_none, parse_date, MAX_MINOR_AMOUNT


router = APIRouter(prefix="/transactions", tags=["transactions"])


# === Request models ===

class TransactionRequest(BaseModel):
    type: Literal["income", "expense", "transfer"]
    amount: Annotated[StrictInt, Field(gt=0, le=MAX_MINOR_AMOUNT)]  # минимальные единицы валюты
    category_id: str | None = None
    wallet_id: str = Field(min_length=1)
    to_wallet_id: str | None = None
    date: date_type
    note: str | None = None

    @field_validator("category_id", "to_wallet_id", "note", mode="before")
    @classmethod
    def empty_as_missing(cls, v):
        return blank_to_none(v)

    @field_validator("date", mode="before")
    @classmethod
    def parse_operation_date(cls, v):
        """"2024-03-15" или "2024-03-15T10:30:00" -> date"""
        return parse_date(v)


class TransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    type: str
    amount: int
    category_id: str | None = None
    wallet_id: str
    to_wallet_id: str | None = None
    date: date_type
    note: str | None = None


class TransactionFeedItem(TransactionResponse):
    category_name: str | None = None
    category_icon: str | None = None
    category_color: str | None = None
    wallet_name: str | None = None
    to_wallet_name: str | None = None


# === Endpoints ===

@router.get("")
def list_transactions(
    db: Session = Depends(get_db),
    limit: int | None = None,
    offset: int = 0,
    wallet_id: str | None = None,
    month: str | None = None,
):
    """Лента операций (последние транзакции)"""
    limit = limit or get_settings().TRANSACTIONS_PAGE_LIMIT
    items = TransactionsFeedService(db).list_recent(
        limit=limit,
        offset=offset,
        wallet_id=wallet_id,
        month=month,
    )
    return {"success": True, "data": [TransactionFeedItem(**item) for item in items]}


@router.get("/{transaction_id}")
def get_transaction(transaction_id: str, db: Session = Depends(get_db)):
    """Одна операция"""
    tx = TransactionsFeedService(db).get(transaction_id)
    return {"success": True, "data": TransactionResponse.model_validate(tx)}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_transaction(
    req: TransactionRequest,
    db: Session = Depends(get_db),
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
):
    """Создать операцию (income / expense / transfer)"""
    tx = LedgerEngine(db).create_transaction(
        type=req.type,
        amount=req.amount,
        wallet_id=req.wallet_id,
        date=req.date,
        to_wallet_id=req.to_wallet_id,
        category_id=req.category_id,
        note=req.note,
        idempotency_key=idempotency_key,
    )
    return {"success": True, "data": TransactionResponse.model_validate(tx)}


@router.put("/{transaction_id}")
def update_transaction(
    transaction_id: str,
    req: TransactionRequest,
    db: Session = Depends(get_db),
):
    """Изменить операцию: реверс старого эффекта + применение нового"""
    tx = LedgerEngine(db).update_transaction(
        transaction_id,
        type=req.type,
        amount=req.amount,
        wallet_id=req.wallet_id,
        date=req.date,
        to_wallet_id=req.to_wallet_id,
        category_id=req.category_id,
        note=req.note,
    )
    return {"success": True, "data": TransactionResponse.model_validate(tx)}


@router.delete("/{transaction_id}")
def delete_transaction(transaction_id: str, db: Session = Depends(get_db)):
    """Удалить операцию и откатить её эффект на балансах"""
    LedgerEngine(db).delete_transaction(transaction_id)
    return {"success": True}
