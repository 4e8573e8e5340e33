"""
Wallet domain constants
"""

# Wallet types
WALLET_TYPE_BANK = "bank"
WALLET_TYPE_CASH = "cash"
WALLET_TYPE_EWALLET = "ewallet"
WALLET_TYPE_CREDIT = "credit"    # Кредитка - баланс может быть отрицательным
WALLET_TYPE_SAVINGS = "savings"
WALLET_TYPE_OTHER = "other"

WALLET_TYPES = (
    WALLET_TYPE_BANK,
    WALLET_TYPE_CASH,
    WALLET_TYPE_EWALLET,
    WALLET_TYPE_CREDIT,
    WALLET_TYPE_SAVINGS,
    WALLET_TYPE_OTHER,
)
