"""
Ledger error taxonomy

Маппинг на HTTP-статусы делается в app/main.py:
- LedgerValidationError -> 400
- NotFoundError -> 404
- InsufficientFundsError -> 400
- PersistenceError -> 500
"""


class LedgerError(Exception):
    """Базовая ошибка приложения"""
    pass


class LedgerValidationError(LedgerError, ValueError):
    """Некорректные входные данные (сумма, тип, отсутствующее поле)"""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class NotFoundError(LedgerError, LookupError):
    """Кошелёк / категория / транзакция / цель / бюджет не найдены"""
    pass


class InsufficientFundsError(LedgerError):
    """Недостаточно средств в кошельке (проверяется только для взносов в цель)"""

    def __init__(self, message: str, available: int, requested: int):
        super().__init__(message)
        self.available = available
        self.requested = requested


class PersistenceError(LedgerError):
    """Атомарная запись в БД не удалась - изменения откатены целиком"""
    pass
