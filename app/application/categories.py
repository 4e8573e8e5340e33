"""
Category use cases
"""
import uuid
from sqlalchemy.orm import Session

from app.domain.category import CATEGORY_TYPES, CATEGORY_GROUPS, DEFAULT_CATEGORY_GROUP
from app.domain.errors import LedgerValidationError, NotFoundError
from app.infrastructure.db.models import Budget, Category, Transaction
from app.infrastructure.db.session import atomic


class CategoryValidationError(LedgerValidationError):
    """Ошибка валидации категории"""
    pass


def _validate(name: str | None = None, type: str | None = None, group: str | None = None) -> None:
    if name is not None and not name.strip():
        raise CategoryValidationError("Название категории не может быть пустым", field="name")
    if type is not None and type not in CATEGORY_TYPES:
        raise CategoryValidationError(
            f"Неверный тип категории: {type}. Используйте income или expense", field="type"
        )
    if group is not None and group not in CATEGORY_GROUPS:
        raise CategoryValidationError(
            f"Неверная группа: {group}. Используйте needs, wants или savings", field="group"
        )


def get_category_or_404(db: Session, category_id: str) -> Category:
    category = db.get(Category, category_id)
    if not category:
        raise NotFoundError("Категория не найдена")
    return category


class CreateCategoryUseCase:
    """Use case: Создать категорию"""

    def __init__(self, db: Session):
        self.db = db

    def execute(
        self,
        name: str,
        type: str,
        icon: str | None = None,
        color: str | None = None,
        group: str | None = None,
    ) -> Category:
        group = group or DEFAULT_CATEGORY_GROUP
        _validate(name=name or "", type=type, group=group)

        category = Category(
            id=str(uuid.uuid4()),
            name=name.strip(),
            type=type,
            icon=icon,
            color=color,
            group=group,
        )
        with atomic(self.db, "category_created"):
            self.db.add(category)
        return category


class UpdateCategoryUseCase:
    """Use case: Частичное обновление категории"""

    def __init__(self, db: Session):
        self.db = db

    def execute(self, category_id: str, **changes) -> Category:
        category = get_category_or_404(self.db, category_id)
        _validate(
            name=changes.get("name"),
            type=changes.get("type"),
            group=changes.get("group"),
        )

        with atomic(self.db, "category_updated"):
            for key in ("name", "type", "icon", "color", "group"):
                if key in changes and changes[key] is not None:
                    value = changes[key]
                    setattr(category, key, value.strip() if key == "name" else value)
        return category


class DeleteCategoryUseCase:
    """
    Use case: Удалить категорию

    Категорию, на которую ссылаются транзакции, удалить нельзя.
    Бюджеты категории удаляются вместе с ней.
    """

    def __init__(self, db: Session):
        self.db = db

    def execute(self, category_id: str) -> None:
        category = get_category_or_404(self.db, category_id)

        used = self.db.query(Transaction.id).filter(
            Transaction.category_id == category_id
        ).first()
        if used:
            raise CategoryValidationError("Категория используется в операциях", field="category_id")

        with atomic(self.db, "category_deleted"):
            self.db.query(Budget).filter(Budget.category_id == category_id).delete(
                synchronize_session=False
            )
            self.db.delete(category)
