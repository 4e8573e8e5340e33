"""
Goal use cases - savings goals CRUD

Взнос в цель (contribute) меняет баланс кошелька и потому живёт в
LedgerEngine.contribute_to_goal, а не здесь.
"""
import uuid
from datetime import date
from typing import List

from sqlalchemy.orm import Session

from app.domain.errors import LedgerValidationError, NotFoundError
from app.infrastructure.db.models import Goal
from app.infrastructure.db.session import atomic
from app.utils.validation import is_minor_amount


class GoalValidationError(LedgerValidationError):
    """Ошибка валидации цели"""
    pass


def _validate(name: str, target_amount, current_amount) -> None:
    if not (name or "").strip():
        raise GoalValidationError("Название цели не может быть пустым", field="name")
    if not is_minor_amount(target_amount) or target_amount <= 0:
        raise GoalValidationError("Целевая сумма должна быть положительным целым числом", field="target_amount")
    if not is_minor_amount(current_amount) or current_amount < 0:
        raise GoalValidationError("Накопленная сумма не может быть отрицательной", field="current_amount")


def get_goal_or_404(db: Session, goal_id: str) -> Goal:
    goal = db.get(Goal, goal_id)
    if not goal:
        raise NotFoundError("Цель не найдена")
    return goal


def list_goals(db: Session) -> List[Goal]:
    return db.query(Goal).order_by(Goal.created_at.desc(), Goal.id.asc()).all()


class CreateGoalUseCase:
    """Use case: Создать цель накопления"""

    def __init__(self, db: Session):
        self.db = db

    def execute(
        self,
        name: str,
        target_amount: int,
        current_amount: int = 0,
        deadline: date | None = None,
        color: str | None = None,
        icon: str | None = None,
    ) -> Goal:
        """
        Создать цель

        Args:
            name: Название цели
            target_amount: Целевая сумма (> 0)
            current_amount: Уже накоплено (>= 0)
            deadline: Срок (опционально)

        Returns:
            Созданная цель
        """
        _validate(name, target_amount, current_amount)

        goal = Goal(
            id=str(uuid.uuid4()),
            name=name.strip(),
            target_amount=target_amount,
            current_amount=current_amount,
            deadline=deadline,
            color=color,
            icon=icon,
        )
        with atomic(self.db, "goal_created"):
            self.db.add(goal)
        return goal


class UpdateGoalUseCase:
    """
    Use case: Обновить цель (полная замена полей)

    current_amount редактируется вручную:
    это счётчик прогресса, а не кэш истории.
    """

    def __init__(self, db: Session):
        self.db = db

    def execute(
        self,
        goal_id: str,
        name: str,
        target_amount: int,
        current_amount: int = 0,
        deadline: date | None = None,
        color: str | None = None,
        icon: str | None = None,
    ) -> Goal:
        goal = get_goal_or_404(self.db, goal_id)
        _validate(name, target_amount, current_amount)

        with atomic(self.db, "goal_updated"):
            goal.name = name.strip()
            goal.target_amount = target_amount
            goal.current_amount = current_amount
            goal.deadline = deadline
            goal.color = color
            goal.icon = icon
        return goal


class DeleteGoalUseCase:
    """Use case: Удалить цель (транзакции взносов остаются в истории как расходы)"""

    def __init__(self, db: Session):
        self.db = db

    def execute(self, goal_id: str) -> None:
        goal = get_goal_or_404(self.db, goal_id)
        with atomic(self.db, "goal_deleted"):
            self.db.delete(goal)
