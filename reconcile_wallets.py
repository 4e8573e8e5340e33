"""
Сверить балансы кошельков с историей транзакций вручную

Run:
    python reconcile_wallets.py              # все кошельки
    python reconcile_wallets.py <wallet_id>  # один кошелёк
"""
import sys
import traceback

from app.application.reconciliation import ReconcileWalletUseCase
from app.infrastructure.db.models import Wallet
from app.infrastructure.db.session import get_session_factory
from app.utils.money import format_money

db = get_session_factory()()

try:
    use_case = ReconcileWalletUseCase(db)
    if len(sys.argv) > 1:
        print(f"Сверяем кошелёк {sys.argv[1]}...")
        reports = [use_case.execute(sys.argv[1])]
    else:
        print("Сверяем все кошельки...")
        reports = use_case.execute_all()

    for report in reports:
        wallet = db.get(Wallet, report.wallet_id)
        mark = "!" if report.corrected else "✓"
        line = f"  {mark} {wallet.name}: {format_money(report.calculated_balance, wallet.currency)}"
        if report.corrected:
            line += f" (было {format_money(report.previous_balance, wallet.currency)})"
        print(line)

    corrected = sum(1 for r in reports if r.corrected)
    print(f"✓ Проверено кошельков: {len(reports)}, исправлено: {corrected}")

except Exception as e:
    print(f"✗ ОШИБКА: {e}")
    traceback.print_exc()
    sys.exit(1)

finally:
    db.close()
