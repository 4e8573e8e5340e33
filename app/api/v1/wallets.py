"""
Wallet API endpoints
"""
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field, StrictInt
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.application.reconciliation import ReconcileWalletUseCase, ReconcileReport
from app.application.wallets import (
    CreateWalletUseCase, UpdateWalletUseCase, ArchiveWalletUseCase, get_wallet_or_404,
)
from app.config import get_settings
from app.infrastructure.db.models import Wallet
from app.utils.validation import MIN_MINOR_AMOUNT, MAX_MINOR_AMOUNT


router = APIRouter(prefix="/wallets", tags=["wallets"])


# === Request/Response models ===

class CreateWalletRequest(BaseModel):
    name: str = Field(min_length=1)
    type: str = "other"  # bank, cash, ewallet, credit, savings, other
    currency: str = Field(default_factory=lambda: get_settings().DEFAULT_CURRENCY)
    initial_balance: Annotated[StrictInt, Field(ge=MIN_MINOR_AMOUNT, le=MAX_MINOR_AMOUNT)] = 0  # Начальный баланс (минимальные единицы)
    color: str | None = None
    icon: str | None = None


class UpdateWalletRequest(BaseModel):
    """Баланс здесь не редактируется - только через операции"""
    name: str | None = None
    type: str | None = None
    currency: str | None = None
    color: str | None = None
    icon: str | None = None


class WalletResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    type: str
    currency: str
    initial_balance: int
    balance: int
    color: str | None = None
    icon: str | None = None
    is_archived: bool
    created_at: datetime | None = None


class ReconcileResponse(BaseModel):
    wallet_id: str
    previous_balance: int
    calculated_balance: int
    corrected: bool
    removed_synthetic: int


def _report(report: ReconcileReport) -> ReconcileResponse:
    return ReconcileResponse(
        wallet_id=report.wallet_id,
        previous_balance=report.previous_balance,
        calculated_balance=report.calculated_balance,
        corrected=report.corrected,
        removed_synthetic=report.removed_synthetic,
    )


# === Endpoints ===

@router.get("")
def list_wallets(db: Session = Depends(get_db), include_archived: bool = False):
    """Список кошельков (новые сверху)"""
    query = db.query(Wallet)
    if not include_archived:
        query = query.filter(Wallet.is_archived == False)

    wallets = query.order_by(Wallet.created_at.desc(), Wallet.id.asc()).all()
    return {"success": True, "data": [WalletResponse.model_validate(w) for w in wallets]}


@router.get("/{wallet_id}")
def get_wallet(wallet_id: str, db: Session = Depends(get_db)):
    wallet = get_wallet_or_404(db, wallet_id)
    return {"success": True, "data": WalletResponse.model_validate(wallet)}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_wallet(req: CreateWalletRequest, db: Session = Depends(get_db)):
    """Создать новый кошелёк"""
    wallet = CreateWalletUseCase(db).execute(
        name=req.name,
        currency=req.currency,
        type=req.type,
        initial_balance=req.initial_balance,
        color=req.color,
        icon=req.icon,
    )
    return {"success": True, "data": WalletResponse.model_validate(wallet)}


@router.put("/{wallet_id}")
def update_wallet(wallet_id: str, req: UpdateWalletRequest, db: Session = Depends(get_db)):
    """Изменить свойства кошелька"""
    changes = req.model_dump(exclude_unset=True)
    wallet = UpdateWalletUseCase(db).execute(wallet_id, **changes)
    return {"success": True, "data": WalletResponse.model_validate(wallet)}


@router.delete("/{wallet_id}")
def archive_wallet(wallet_id: str, db: Session = Depends(get_db)):
    """Архивировать кошелёк (soft delete)"""
    ArchiveWalletUseCase(db).execute(wallet_id)
    return {"success": True}


@router.post("/reconcile")
def reconcile_all_wallets(db: Session = Depends(get_db)):
    """Сверить балансы всех кошельков с историей"""
    reports = ReconcileWalletUseCase(db).execute_all()
    return {"success": True, "data": [_report(r) for r in reports]}


@router.post("/{wallet_id}/reconcile")
def reconcile_wallet(wallet_id: str, db: Session = Depends(get_db)):
    """Сверить баланс кошелька с историей"""
    report = ReconcileWalletUseCase(db).execute(wallet_id)
    return {"success": True, "data": _report(report)}
