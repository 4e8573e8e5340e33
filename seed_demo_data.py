"""
Seed demo data (кошельки, категории, операции за 3 месяца, бюджеты, цель).
Run:  python seed_demo_data.py
"""
import sys
from datetime import date

# ── bootstrap ────────────────────────────────────────────────────
from app.infrastructure.db.session import get_session_factory
from app.infrastructure.db.models import Wallet

from app.application.categories import CreateCategoryUseCase
from app.application.wallets import CreateWalletUseCase
from app.application.budgets import UpsertBudgetUseCase
from app.application.goals import CreateGoalUseCase
from app.application.ledger import LedgerEngine

db = get_session_factory()()

if db.query(Wallet).count() > 0:
    print("Data exists, nothing to seed."); sys.exit(0)

today = date.today()


def month_back(n: int) -> tuple[int, int]:
    y, m = today.year, today.month - n
    while m <= 0:
        m += 12
        y -= 1
    return y, m


# ── wallets ──────────────────────────────────────────────────────
wallets = CreateWalletUseCase(db)
w_bank = wallets.execute(name="BCA", currency="IDR", type="bank", initial_balance=5_000_000).id
w_cash = wallets.execute(name="Cash", currency="IDR", type="cash", initial_balance=500_000).id
w_gopay = wallets.execute(name="GoPay", currency="IDR", type="ewallet").id
print("✓ wallets")

# ── categories ───────────────────────────────────────────────────
categories = CreateCategoryUseCase(db)
inc_salary = categories.execute(name="Salary", type="income", icon="💼", group="needs").id
exp_food = categories.execute(name="Food", type="expense", icon="🍜", group="needs").id
exp_transport = categories.execute(name="Transport", type="expense", icon="🛵", group="needs").id
exp_fun = categories.execute(name="Entertainment", type="expense", icon="🎬", group="wants").id
print("✓ categories")

# ── transactions ─────────────────────────────────────────────────
ledger = LedgerEngine(db)
count = 0
for back in (2, 1, 0):
    y, m = month_back(back)
    ledger.create_transaction(type="income", amount=12_000_000, wallet_id=w_bank,
                              date=date(y, m, 1), category_id=inc_salary, note="Monthly salary")
    ledger.create_transaction(type="transfer", amount=300_000, wallet_id=w_bank,
                              to_wallet_id=w_gopay, date=date(y, m, 2), note="Top up")
    ledger.create_transaction(type="expense", amount=1_850_000, wallet_id=w_bank,
                              date=date(y, m, 5), category_id=exp_food, note="Groceries")
    ledger.create_transaction(type="expense", amount=150_000, wallet_id=w_gopay,
                              date=date(y, m, 7), category_id=exp_transport)
    ledger.create_transaction(type="expense", amount=120_000, wallet_id=w_cash,
                              date=date(y, m, 12), category_id=exp_fun, note="Cinema")
    count += 5
print(f"✓ transactions: {count}")

# ── budgets ──────────────────────────────────────────────────────
month = f"{today.year:04d}-{today.month:02d}"
budgets = UpsertBudgetUseCase(db)
budgets.execute(category_id=exp_food, amount=2_500_000, month=month)
budgets.execute(category_id=exp_transport, amount=400_000, month=month)
budgets.execute(category_id=exp_fun, amount=300_000, month=month)
print("✓ budgets")

# ── goal ─────────────────────────────────────────────────────────
goal = CreateGoalUseCase(db).execute(name="Emergency fund", target_amount=30_000_000)
ledger.contribute_to_goal(goal_id=goal.id, amount=1_000_000, wallet_id=w_bank, date=today)
print("✓ goal")

db.close()
print("Done.")
