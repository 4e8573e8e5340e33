"""
Category domain constants
"""

CATEGORY_TYPE_INCOME = "income"
CATEGORY_TYPE_EXPENSE = "expense"

CATEGORY_TYPES = (CATEGORY_TYPE_INCOME, CATEGORY_TYPE_EXPENSE)

# Группы правила 50/30/20
CATEGORY_GROUPS = ("needs", "wants", "savings")
DEFAULT_CATEGORY_GROUP = "wants"
