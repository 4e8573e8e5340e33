"""
Validation utilities
"""
import re
from datetime import date, datetime

_MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")
_CURRENCY_RE = re.compile(r"^[A-Z]{3}$")

# Денежные колонки - BIGINT (signed 64-bit)
MAX_MINOR_AMOUNT = 2**63 - 1
MIN_MINOR_AMOUNT = -(2**63)


def is_minor_amount(value) -> bool:
    """
    Целое число в минимальных единицах валюты, помещающееся в BIGINT
    (bool не считается числом)

    Example:
        >>> is_minor_amount(1500)
        True
        >>> is_minor_amount(15.5)
        False
        >>> is_minor_amount(2**63)
        False
    """
    if not isinstance(value, int) or isinstance(value, bool):
        return False
    return fits_bigint(value)


def fits_bigint(value: int) -> bool:
    """Значение помещается в денежную колонку (BIGINT)"""
    return MIN_MINOR_AMOUNT <= value <= MAX_MINOR_AMOUNT


def is_valid_month(value: str) -> bool:
    """
    Проверка формата месяца YYYY-MM

    Example:
        >>> is_valid_month("2024-03")
        True
        >>> is_valid_month("2024-13")
        False
    """
    return isinstance(value, str) and bool(_MONTH_RE.match(value))


def is_valid_currency(value: str) -> bool:
    """Код валюты: строго 3 заглавные латинские буквы"""
    return isinstance(value, str) and bool(_CURRENCY_RE.match(value))


def parse_date(value) -> date:
    """
    Разобрать дату операции

    Принимает date, datetime или строку ISO ("2024-03-15" / "2024-03-15T10:30:00").
    Время отбрасывается - транзакции привязаны к календарному дню.

    Raises:
        ValueError: если строку нельзя разобрать
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Некорректная дата")

    raw = value.strip()
    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError:
        raise ValueError(f"Некорректная дата: «{value}». Используйте формат YYYY-MM-DD")


def month_bounds(month: str) -> tuple[date, date]:
    """
    Границы месяца: [первый день, первый день следующего месяца)

    Example:
        >>> month_bounds("2024-12")
        (date(2024, 12, 1), date(2025, 1, 1))
    """
    if not is_valid_month(month):
        raise ValueError(f"Некорректный месяц: «{month}». Используйте формат YYYY-MM")
    year, mon = int(month[:4]), int(month[5:7])
    start = date(year, mon, 1)
    end = date(year + 1, 1, 1) if mon == 12 else date(year, mon + 1, 1)
    return start, end


def blank_to_none(value):
    """Пустая строка из формы -> None"""
    if isinstance(value, str) and not value.strip():
        return None
    return value
