"""
Wallet use cases - business logic for wallet operations

Баланс кошелька здесь не меняется (кроме начального при создании):
все изменения баланса идут через LedgerEngine.
"""
import logging
import uuid
from sqlalchemy.orm import Session

from app.domain.errors import LedgerValidationError, NotFoundError
from app.domain.wallet import WALLET_TYPES, WALLET_TYPE_OTHER
from app.infrastructure.db.models import Wallet
from app.infrastructure.db.session import atomic
from app.utils.validation import is_minor_amount, is_valid_currency

logger = logging.getLogger(__name__)


class WalletValidationError(LedgerValidationError):
    """Ошибка валидации кошелька"""
    pass


def _validate_type(wallet_type: str) -> None:
    if wallet_type not in WALLET_TYPES:
        raise WalletValidationError(
            f"Неверный тип кошелька: {wallet_type}. Используйте {', '.join(WALLET_TYPES)}",
            field="type",
        )


def _validate_currency(currency: str) -> None:
    if not is_valid_currency(currency):
        raise WalletValidationError(
            f"Неверный код валюты: «{currency}». Используйте 3 заглавные буквы (например IDR, USD, EUR)",
            field="currency",
        )


def get_wallet_or_404(db: Session, wallet_id: str) -> Wallet:
    wallet = db.get(Wallet, wallet_id)
    if not wallet:
        raise NotFoundError("Кошелёк не найден")
    return wallet


class CreateWalletUseCase:
    """
    Use case: Создать новый кошелёк

    balance стартует с initial_balance - это "нулевая точка" истории,
    от которой считает сверка.
    """

    def __init__(self, db: Session):
        self.db = db

    def execute(
        self,
        name: str,
        currency: str,
        type: str = WALLET_TYPE_OTHER,
        initial_balance: int = 0,
        color: str | None = None,
        icon: str | None = None,
    ) -> Wallet:
        """
        Создать кошелёк

        Args:
            name: Название кошелька
            currency: Валюта (IDR, USD, EUR)
            type: bank, cash, ewallet, credit, savings, other
            initial_balance: Начальный баланс (целое, может быть < 0 для кредиток)
            color, icon: Оформление

        Returns:
            Созданный кошелёк
        """
        name = (name or "").strip()
        if not name:
            raise WalletValidationError("Название кошелька не может быть пустым", field="name")
        _validate_type(type)
        _validate_currency(currency)
        if not is_minor_amount(initial_balance):
            raise WalletValidationError("Начальный баланс должен быть целым числом", field="initial_balance")

        wallet = Wallet(
            id=str(uuid.uuid4()),
            name=name,
            type=type,
            currency=currency,
            initial_balance=initial_balance,
            balance=initial_balance,
            color=color,
            icon=icon,
            is_archived=False,
        )

        with atomic(self.db, "wallet_created"):
            self.db.add(wallet)

        logger.info(f"[wallets] created {wallet.id} ({wallet.type}) balance={wallet.balance}")
        return wallet


class UpdateWalletUseCase:
    """
    Use case: Изменить свойства кошелька (название, тип, валюта, оформление)

    balance / initial_balance не редактируются: баланс меняется только транзакциями.
    """

    def __init__(self, db: Session):
        self.db = db

    def execute(self, wallet_id: str, **changes) -> Wallet:
        wallet = get_wallet_or_404(self.db, wallet_id)

        if "name" in changes:
            name = (changes["name"] or "").strip()
            if not name:
                raise WalletValidationError("Название кошелька не может быть пустым", field="name")
            changes["name"] = name
        if "type" in changes:
            _validate_type(changes["type"])
        if "currency" in changes:
            _validate_currency(changes["currency"])

        with atomic(self.db, "wallet_updated"):
            for key in ("name", "type", "currency", "color", "icon"):
                if key in changes:
                    setattr(wallet, key, changes[key])

        return wallet


class ArchiveWalletUseCase:
    """
    Use case: Архивировать кошелёк (soft delete)

    Кошельки с транзакциями физически не удаляются (FK ON DELETE RESTRICT),
    история и баланс сохраняются.
    """

    def __init__(self, db: Session):
        self.db = db

    def execute(self, wallet_id: str) -> None:
        wallet = get_wallet_or_404(self.db, wallet_id)
        if wallet.is_archived:
            return

        with atomic(self.db, "wallet_archived"):
            wallet.is_archived = True

        logger.info(f"[wallets] archived {wallet_id}")
