"""Read-only reporting over settled and outstanding debts.

Everything here is scoped either to a group or to a user (as debtor or
creditor) and tolerates empty result sets.
"""
import logging
from typing import List, Optional
from sqlalchemy import select, func, or_
from sqlalchemy.orm import aliased
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.debt import Debt
from app.models.expense import Expense
from app.models.user import User
from app.core.exceptions import AuthorizationError, ValidationError
from app.core.utils import ZERO, to_money, as_naive_utc
from app.services.balance_services import live_debts_stmt
from app.services.membership import get_group, is_active_member

logger = logging.getLogger(__name__)


def settlement_hours(debt: Debt) -> Optional[float]:
    if debt.settled_at is None or debt.created_at is None:
        return None
    delta = as_naive_utc(debt.settled_at) - as_naive_utc(debt.created_at)
    return delta.total_seconds() / 3600


async def authorize_scope(
    db: AsyncSession, acting_user_id: int, group_id: Optional[int] = None, user_id: Optional[int] = None
):
    if (group_id is None) == (user_id is None):
        raise ValidationError("Exactly one of group_id or user_id is required", field="scope")

    if group_id is not None:
        await get_group(db, group_id)
        if not await is_active_member(db, group_id, acting_user_id):
            raise AuthorizationError("User is not a member of this group", field="group_id")
    elif user_id != acting_user_id:
        raise AuthorizationError("Users can only view their own settlements", field="user_id")


def _scope(stmt, group_id: Optional[int], user_id: Optional[int]):
    if group_id is not None:
        return stmt.where(Expense.group_id == group_id)
    return stmt.where(or_(Debt.debtor_id == user_id, Debt.creditor_id == user_id))


async def _scoped_debts(db: AsyncSession, group_id: Optional[int], user_id: Optional[int]) -> List[Debt]:
    res = await db.execute(_scope(live_debts_stmt(), group_id, user_id))
    return list(res.scalars().all())


async def get_settlement_summary(db: AsyncSession, group_id: Optional[int] = None, user_id: Optional[int] = None):
    debts = await _scoped_debts(db, group_id, user_id)

    settled = [d for d in debts if d.is_settled]
    unsettled = [d for d in debts if not d.is_settled]

    settled_amount = sum((to_money(d.amount) for d in settled), ZERO)
    unsettled_amount = sum((to_money(d.amount) for d in unsettled), ZERO)

    return {
        "group_id": group_id,
        "user_id": user_id,
        "total_debts": len(debts),
        "settled_debts": len(settled),
        "unsettled_debts": len(unsettled),
        "total_amount": settled_amount + unsettled_amount,
        "settled_amount": settled_amount,
        "unsettled_amount": unsettled_amount,
        "last_settlement_date": max((d.settled_at for d in settled), key=as_naive_utc, default=None),
    }


async def get_settlement_analytics(db: AsyncSession, group_id: Optional[int] = None, user_id: Optional[int] = None):
    debts = await _scoped_debts(db, group_id, user_id)

    settled = [d for d in debts if d.is_settled]
    hours = [h for h in (settlement_hours(d) for d in settled) if h is not None]

    return {
        "group_id": group_id,
        "user_id": user_id,
        "total_settlements": len(debts),
        "settled_count": len(settled),
        "unsettled_count": len(debts) - len(settled),
        "total_settled_amount": sum((to_money(d.amount) for d in settled), ZERO),
        "total_unsettled_amount": sum(
            (to_money(d.amount) for d in debts if not d.is_settled), ZERO
        ),
        "average_settlement_time_hours": round(sum(hours) / len(hours), 2) if hours else 0.0,
    }


async def get_settlement_history(
    db: AsyncSession,
    group_id: Optional[int] = None,
    user_id: Optional[int] = None,
    page: int = 0,
    size: int = 20,
):
    debtor = aliased(User)
    creditor = aliased(User)

    base = _scope(live_debts_stmt(), group_id, user_id)

    count_q = select(func.count()).select_from(base.subquery())
    total = (await db.execute(count_q)).scalar_one()

    q = (
        _scope(
            select(
                Debt,
                Expense.title.label("expense_title"),
                Expense.group_id.label("group_id"),
                Expense.currency.label("currency"),
                debtor.name.label("debtor_name"),
                creditor.name.label("creditor_name"),
            )
            .join(Expense, Expense.id == Debt.expense_id)
            .outerjoin(debtor, debtor.id == Debt.debtor_id)
            .outerjoin(creditor, creditor.id == Debt.creditor_id)
            .where(Expense.is_deleted == False, Debt.is_deleted == False),
            group_id,
            user_id,
        )
        .order_by(Debt.created_at.desc(), Debt.id.desc())
        .offset(page * size)
        .limit(size)
    )
    res = await db.execute(q)

    items = []
    for row in res.all():
        debt = row.Debt
        hours = settlement_hours(debt)
        items.append({
            "debt_id": debt.id,
            "group_id": row.group_id,
            "expense_id": debt.expense_id,
            "expense_title": row.expense_title,
            "debtor_id": debt.debtor_id,
            "debtor_name": row.debtor_name,
            "creditor_id": debt.creditor_id,
            "creditor_name": row.creditor_name,
            "amount": to_money(debt.amount),
            "currency": row.currency,
            "payment_method": debt.payment_method,
            "notes": debt.notes,
            "is_settled": debt.is_settled,
            "settled_at": debt.settled_at,
            "created_at": debt.created_at,
            "settlement_hours": round(hours, 2) if hours is not None else None,
        })

    logger.debug("Settlement history page %s returned %d of %d rows", page, len(items), total)

    return {
        "items": items,
        "page": page,
        "size": size,
        "total": total,
        "has_next": (page + 1) * size < total,
    }
