"""
Unified money formatting for the whole project.

Суммы хранятся целыми числами в минимальных единицах валюты.

Usage:
    from app.utils.money import format_money

    format_money(1500000, "IDR")   -> "1 500 000 IDR"
    format_money(120050, "USD")    -> "1 200.50 USD"
    format_money(-2500, "EUR")     -> "-25.00 EUR"
"""
from decimal import Decimal

# Количество знаков после запятой; по умолчанию 2 (центы, копейки)
_CURRENCY_EXPONENT = {
    "IDR": 0,
    "JPY": 0,
    "KRW": 0,
}

# Суффикс для RUB: «руб.», для остальных ISO-код валюты
_CURRENCY_SUFFIX = {
    "RUB": "руб.",
}


def currency_label(code: str) -> str:
    """Человекочитаемый суффикс валюты."""
    return _CURRENCY_SUFFIX.get(code, code)


def currency_exponent(code: str) -> int:
    """Сколько минимальных единиц в основной: 10 ** exponent."""
    return _CURRENCY_EXPONENT.get(code, 2)


def format_money(amount: int, currency: str = "IDR") -> str:
    """
    Отформатировать сумму в минимальных единицах с пробелами-разделителями тысяч.

    Args:
        amount: целое число минимальных единиц
        currency: ISO-код валюты (IDR, USD, EUR …)

    Returns:
        "1 500 000 IDR" / "1 200.50 USD"
    """
    exponent = currency_exponent(currency)
    value = Decimal(amount).scaleb(-exponent)
    fmt = f"{{:,.{exponent}f}}"
    formatted = fmt.format(value).replace(",", " ")
    return f"{formatted} {currency_label(currency)}"
