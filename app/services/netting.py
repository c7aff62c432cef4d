from decimal import Decimal
from typing import Dict, Iterable
from app.core.utils import ZERO, to_money

def compute_net_balances(debts: Iterable) -> Dict[int, Decimal]:
    """Signed balance per user: positive is owed money, negative owes money."""
    net: Dict[int, Decimal] = {}
    for debt in debts:
        amount = to_money(debt.amount)
        net[debt.debtor_id] = net.get(debt.debtor_id, ZERO) - amount
        net[debt.creditor_id] = net.get(debt.creditor_id, ZERO) + amount
    return net
