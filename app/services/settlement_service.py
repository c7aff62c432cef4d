"""Settlement listing and execution for a group.

Execution always re-derives the live transaction list inside the caller's
transaction, then stamps the matching outstanding debts. The lookup of
outstanding debts for a pair runs with ``FOR UPDATE`` in the same transaction
as the write, so a second concurrent settler finds no rows and the transaction
is skipped instead of being applied twice.
"""
import logging
from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.debt import Debt
from app.models.group import Group
from app.models.enums import GroupType, SettlementMode, SettlementStatus
from app.core.exceptions import (
    AuthorizationError,
    PersistenceError,
    SettlementTransactionNotFound,
    ValidationError,
)
from app.core.logging import log_business_event
from app.core.utils import ZERO, utcnow
from app.services.balance_services import load_outstanding_debts, outstanding_debts_stmt
from app.services.membership import get_group, is_active_member, is_admin
from app.services.netting import compute_net_balances
from app.services.settlement_generator import (
    SettlementTransaction,
    generate_detailed,
    generate_simplified,
)

logger = logging.getLogger(__name__)


def resolve_mode(group: Group, mode: Optional[SettlementMode]) -> SettlementMode:
    if mode is None:
        return SettlementMode(group.settlement_type)
    return SettlementMode(mode)


async def derive_transactions(
    db: AsyncSession, group_id: int, mode: SettlementMode
) -> List[SettlementTransaction]:
    debts = await load_outstanding_debts(db, group_id)
    if mode == SettlementMode.SIMPLIFIED:
        return generate_simplified(group_id, compute_net_balances(debts))
    return generate_detailed(group_id, debts)


async def _require_member(db: AsyncSession, group_id: int, user_id: int):
    if not await is_active_member(db, group_id, user_id):
        raise AuthorizationError("User is not a member of this group", field="group_id")


async def get_available_settlements(
    db: AsyncSession, group_id: int, mode: Optional[SettlementMode], user_id: int
):
    group = await get_group(db, group_id)
    await _require_member(db, group_id, user_id)

    mode = resolve_mode(group, mode)
    transactions = await derive_transactions(db, group_id, mode)

    if group.group_type == GroupType.PERSONAL:
        # personal groups only expose the caller's own payments
        transactions = [t for t in transactions if t.involves(user_id)]

    logger.debug(
        "Group %s has %d available %s settlements for user %s",
        group_id, len(transactions), mode.value, user_id,
    )

    return {
        "group_id": group_id,
        "mode": mode,
        "transactions": transactions,
        "count": len(transactions),
        "total_amount": sum((t.amount for t in transactions), ZERO),
    }


async def settle_transaction(
    db: AsyncSession,
    transaction: SettlementTransaction,
    settled_at,
    payment_method: Optional[str] = None,
    notes: Optional[str] = None,
) -> int:
    """Stamp every outstanding debt between the transaction's pair.

    Returns the number of debts settled; zero means somebody else already
    settled them.
    """
    q = (
        outstanding_debts_stmt(transaction.group_id)
        .where(
            Debt.debtor_id == transaction.from_user_id,
            Debt.creditor_id == transaction.to_user_id,
        )
        .with_for_update(of=Debt)
        .execution_options(populate_existing=True)
    )
    res = await db.execute(q)
    debts = res.scalars().all()

    if not debts:
        logger.warning(
            "No unsettled debts found between users %s and %s in group %s",
            transaction.from_user_id, transaction.to_user_id, transaction.group_id,
        )
        return 0

    for debt in debts:
        debt.mark_settled(settled_at, payment_method, notes)

    return len(debts)


async def _select_transactions(
    db: AsyncSession, group: Group, request, mode: SettlementMode, user_id: int
) -> List[SettlementTransaction]:
    available = await derive_transactions(db, group.id, mode)

    if request.settle_all:
        return available

    by_id = {t.id: t for t in available}
    selected = []
    for transaction_id in dict.fromkeys(request.transaction_ids):
        transaction = by_id.get(transaction_id)
        if transaction is None:
            raise SettlementTransactionNotFound(transaction_id)

        # only settle_all lets a PERSONAL admin act on payments they are not part of
        if group.group_type == GroupType.PERSONAL and not transaction.involves(user_id):
            raise AuthorizationError(
                f"User {user_id} cannot settle transaction {transaction_id} - not involved",
                field="transaction_ids",
            )
        selected.append(transaction)
    return selected


async def execute_settlements(db: AsyncSession, group_id: int, request, user_id: int):
    logger.info("Executing settlements for group %s by user %s", group_id, user_id)

    group = await get_group(db, group_id)
    await _require_member(db, group_id, user_id)
    admin = await is_admin(db, group_id, user_id)

    if not request.settle_all and not request.transaction_ids:
        raise ValidationError(
            "Either transaction_ids or settle_all must be provided", field="transaction_ids"
        )

    if group.group_type == GroupType.PERSONAL and request.settle_all and not admin:
        raise AuthorizationError(
            "Only admins can settle all debts in a PERSONAL group", field="settle_all"
        )

    mode = resolve_mode(group, request.mode)
    selected = await _select_transactions(db, group, request, mode, user_id)

    settled_at = request.settled_at or utcnow()
    executed: List[SettlementTransaction] = []

    try:
        for transaction in selected:
            count = await settle_transaction(
                db, transaction, settled_at, request.payment_method, request.notes
            )
            if count:
                transaction.status = SettlementStatus.SETTLED
                transaction.executed_at = settled_at
                executed.append(transaction)

        await db.flush()
        remaining = await derive_transactions(db, group_id, mode)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Settlement execution failed for group %s", group_id)
        raise PersistenceError() from e

    total_settled = sum((t.amount for t in executed), ZERO)

    log_business_event(
        "SETTLEMENTS_EXECUTED", user_id, "EXECUTE_SETTLEMENTS", "SUCCESS",
        group_id=group_id, mode=mode.value, executed_count=len(executed),
        skipped_count=len(selected) - len(executed), total_settled_amount=total_settled,
    )

    return {
        "executed": executed,
        "remaining": remaining,
        "total_settled_amount": total_settled,
        "executed_count": len(executed),
        "remaining_count": len(remaining),
        "group_id": group_id,
        "mode": mode,
        "timestamp": utcnow(),
    }
