from typing import Iterable, List
from app.models.debt import Debt
from app.models.enums import CreditorKind

def generate_debts(expense_id: int, payer_id: int, splits: Iterable) -> List[Debt]:
    # the payer's own share is never a debt
    debts = []
    for split in splits:
        if split.user_id == payer_id:
            continue
        debts.append(
            Debt(
                debtor_id=split.user_id,
                creditor_id=payer_id,
                creditor_kind=CreditorKind.USER,
                amount=split.amount,
                expense_id=expense_id,
            )
        )
    return debts
