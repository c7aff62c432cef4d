import logging
from decimal import Decimal
from typing import Dict, List
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.debt import Debt
from app.models.expense import Expense
from app.services.netting import compute_net_balances
from app.services.settlement_generator import generate_simplified
from app.services.user_service import get_user_names
from app.core.utils import ZERO, to_money

logger = logging.getLogger(__name__)

def live_debts_stmt():
    return (
        select(Debt)
        .join(Expense, Expense.id == Debt.expense_id)
        .where(
            Expense.is_deleted == False,
            Debt.is_deleted == False,
        )
    )

def outstanding_debts_stmt(group_id: int):
    return (
        live_debts_stmt()
        .where(Expense.group_id == group_id, Debt.settled_at.is_(None))
        .order_by(Debt.created_at, Debt.id)
    )

async def load_outstanding_debts(db: AsyncSession, group_id: int) -> List[Debt]:
    res = await db.execute(outstanding_debts_stmt(group_id))
    return list(res.scalars().all())

async def get_group_net_balances(db: AsyncSession, group_id: int) -> Dict[int, Decimal]:
    debts = await load_outstanding_debts(db, group_id)
    logger.debug("Netting %d outstanding debts for group %s", len(debts), group_id)
    return compute_net_balances(debts)

async def get_group_balances(db: AsyncSession, group_id: int):
    net = await get_group_net_balances(db, group_id)
    net = {uid: amt for uid, amt in net.items() if amt != ZERO}

    transfers = generate_simplified(group_id, net)

    users = await get_user_names(db, net.keys())

    return {
        "group_id": group_id,
        "net": [
            {"user_id": uid, "name": users.get(uid), "balance": amt}
            for uid, amt in sorted(net.items())
        ],
        "settlements": [
            {
                "from_id": t.from_user_id,
                "from_name": users.get(t.from_user_id),
                "to_id": t.to_user_id,
                "to_name": users.get(t.to_user_id),
                "amount": t.amount,
            }
            for t in transfers
        ],
    }

async def get_user_net_balance(db: AsyncSession, user_id: int):
    q = live_debts_stmt().where(
        Debt.settled_at.is_(None),
        or_(Debt.debtor_id == user_id, Debt.creditor_id == user_id),
    )
    res = await db.execute(q)
    debts = res.scalars().all()

    owes = sum((to_money(d.amount) for d in debts if d.debtor_id == user_id), ZERO)
    owed = sum((to_money(d.amount) for d in debts if d.creditor_id == user_id), ZERO)

    return {
        "user_id": user_id,
        "total_owed_to_user": owed,
        "total_user_owes": owes,
        "net_balance": owed - owes,
    }
