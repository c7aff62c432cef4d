"""Turns outstanding obligations into proposed settlement payments.

SIMPLIFIED nets everybody's balance first and greedily pairs the largest
creditor with the largest debtor. The greedy pass is deterministic and keeps
the number of payments low, but it is not guaranteed to hit the theoretical
minimum for every balance distribution.

DETAILED keeps each directed debtor -> creditor pair as its own payment.
"""
import hashlib
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from app.core.utils import ZERO, money_str, to_money
from app.models.enums import SettlementMode, SettlementStatus


@dataclass
class SettlementTransaction:
    id: str
    from_user_id: int
    to_user_id: int
    amount: Decimal
    mode: SettlementMode
    group_id: int
    status: SettlementStatus = SettlementStatus.PENDING
    executed_at: Optional[datetime] = field(default=None)

    def involves(self, user_id: int) -> bool:
        return user_id in (self.from_user_id, self.to_user_id)


def settlement_id(group_id, debtor_id, creditor_id, amount: Decimal) -> str:
    """Stable id for a (group, debtor, creditor, amount) tuple.

    Name-based UUID (version 3) over the MD5 digest of
    ``"group:debtor:creditor:amount"``; the amount is always rendered with two
    decimals so ``50`` and ``50.00`` hash the same.
    """
    key = f"{group_id}:{debtor_id}:{creditor_id}:{money_str(amount)}"
    digest = hashlib.md5(key.encode("utf-8")).digest()
    return str(uuid.UUID(bytes=hashlib.md5(digest).digest(), version=3))


def generate_simplified(group_id: int, balances: Dict[int, Decimal]) -> List[SettlementTransaction]:
    net = {uid: to_money(bal) for uid, bal in balances.items()}

    creditors = sorted((uid for uid, bal in net.items() if bal > ZERO), key=lambda u: (-net[u], u))
    debtors = sorted((uid for uid, bal in net.items() if bal < ZERO), key=lambda u: (net[u], u))

    settlements: List[SettlementTransaction] = []

    while creditors and debtors:
        creditor = creditors[0]
        debtor = debtors[0]

        credit = net[creditor]
        owed = -net[debtor]
        amount = min(credit, owed)

        settlements.append(
            SettlementTransaction(
                id=settlement_id(group_id, debtor, creditor, amount),
                from_user_id=debtor,
                to_user_id=creditor,
                amount=amount,
                mode=SettlementMode.SIMPLIFIED,
                group_id=group_id,
            )
        )

        net[creditor] = credit - amount
        net[debtor] = -(owed - amount)

        if net[creditor] == ZERO:
            creditors.pop(0)
        if net[debtor] == ZERO:
            debtors.pop(0)

    return settlements


def generate_detailed(group_id: int, debts: Iterable) -> List[SettlementTransaction]:
    # dicts keep insertion order, so pairs come out in order of first debt
    pairs: Dict[Tuple[int, int], Decimal] = {}
    for debt in debts:
        key = (debt.debtor_id, debt.creditor_id)
        pairs[key] = pairs.get(key, ZERO) + to_money(debt.amount)

    return [
        SettlementTransaction(
            id=settlement_id(group_id, debtor, creditor, amount),
            from_user_id=debtor,
            to_user_id=creditor,
            amount=amount,
            mode=SettlementMode.DETAILED,
            group_id=group_id,
        )
        for (debtor, creditor), amount in pairs.items()
    ]
