import logging
from typing import List
from sqlalchemy import select, delete, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.expense import Expense
from app.models.expense_split import ExpenseSplit
from app.models.debt import Debt
from app.models.enums import SplitPolicy
from app.core.config import settings
from app.core.exceptions import AuthorizationError, NotFoundError, PersistenceError, ValidationError
from app.core.logging import log_business_event
from app.core.utils import to_money
from app.services.membership import get_group, is_active_member, is_admin, active_members_among
from app.services.split_calculator import ShareInput, calculate_splits
from app.services.debt_generator import generate_debts

logger = logging.getLogger(__name__)

def _to_shares(splits) -> List[ShareInput]:
    return [
        ShareInput(user_id=s.user_id, percentage=s.percentage, amount=s.amount)
        for s in splits
    ]

async def _ensure_participants(db: AsyncSession, group_id: int, shares: List[ShareInput]):
    members = await active_members_among(db, group_id, [s.user_id for s in shares])
    for share in shares:
        if share.user_id not in members:
            raise ValidationError(
                f"User {share.user_id} is not a member of this group",
                field="splits.user_id",
            )

async def _get_live_expense(db: AsyncSession, expense_id: int) -> Expense:
    q = select(Expense).where(Expense.id == expense_id, Expense.is_deleted == False)
    res = await db.execute(q)
    expense = res.scalar_one_or_none()

    if not expense:
        raise NotFoundError(f"Expense {expense_id} not found", field="expense_id")

    return expense

async def _can_modify(db: AsyncSession, expense: Expense, user_id: int) -> bool:
    if user_id in (expense.created_by, expense.paid_by):
        return True
    return await is_admin(db, expense.group_id, user_id)

def _build_splits(expense_id: int, calculated) -> List[ExpenseSplit]:
    return [
        ExpenseSplit(
            expense_id=expense_id,
            user_id=s.user_id,
            percentage=s.percentage,
            amount=s.amount,
        )
        for s in calculated
    ]

def _serialize(expense: Expense, splits, debts):
    return {
        "id": expense.id,
        "group_id": expense.group_id,
        "paid_by": expense.paid_by,
        "created_by": expense.created_by,
        "title": expense.title,
        "description": expense.description,
        "amount": to_money(expense.amount),
        "currency": expense.currency,
        "split_policy": expense.split_policy,
        "created_at": expense.created_at,
        "splits": [
            {
                "user_id": s.user_id,
                "percentage": to_money(s.percentage),
                "amount": to_money(s.amount),
            }
            for s in sorted(splits, key=lambda s: s.user_id)
        ],
        "debts": [
            {
                "id": d.id,
                "debtor_id": d.debtor_id,
                "creditor_id": d.creditor_id,
                "amount": to_money(d.amount),
                "settled_at": d.settled_at,
            }
            for d in debts
        ],
    }

async def _load_children(db: AsyncSession, expense_id: int):
    splits_res = await db.execute(
        select(ExpenseSplit).where(
            ExpenseSplit.expense_id == expense_id,
            ExpenseSplit.is_deleted == False,
        )
    )
    debts_res = await db.execute(
        select(Debt)
        .where(Debt.expense_id == expense_id, Debt.is_deleted == False)
        .order_by(Debt.id)
    )
    return list(splits_res.scalars().all()), list(debts_res.scalars().all())

async def create_expense(db: AsyncSession, data, user_id: int):
    group = await get_group(db, data.group_id)

    if not await is_active_member(db, group.id, user_id):
        raise AuthorizationError("User is not a member of this group", field="group_id")

    payer_id = data.payer_id or user_id
    if not await is_active_member(db, group.id, payer_id):
        raise ValidationError("Payer is not a member of the group", field="payer_id")

    shares = _to_shares(data.splits)
    await _ensure_participants(db, group.id, shares)

    # nothing is written unless the split reconciles
    calculated = calculate_splits(data.amount, data.split_policy, shares)

    try:
        expense = Expense(
            group_id=group.id,
            paid_by=payer_id,
            created_by=user_id,
            title=data.title,
            description=data.description,
            amount=data.amount,
            currency=data.currency or settings.DEFAULT_CURRENCY,
            split_policy=data.split_policy,
        )
        db.add(expense)
        await db.flush()  # gives expense.id

        splits = _build_splits(expense.id, calculated)
        db.add_all(splits)

        debts = generate_debts(expense.id, payer_id, splits)
        db.add_all(debts)

        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Failed to persist expense for group %s", group.id)
        raise PersistenceError() from e

    log_business_event(
        "EXPENSE_CREATED", user_id, "CREATE_EXPENSE", "SUCCESS",
        expense_id=expense.id, group_id=group.id, amount=expense.amount,
        currency=expense.currency, split_policy=expense.split_policy.value,
        split_count=len(splits),
    )
    return _serialize(expense, splits, debts)

async def update_expense(db: AsyncSession, data, expense_id: int, user_id: int):
    expense = await _get_live_expense(db, expense_id)

    if not await _can_modify(db, expense, user_id):
        raise AuthorizationError("You can't edit this expense", field="expense_id")

    new_amount = data.amount if data.amount is not None else to_money(expense.amount)

    shares = None
    if data.splits is not None:
        shares = _to_shares(data.splits)
        await _ensure_participants(db, expense.group_id, shares)
    elif new_amount != to_money(expense.amount):
        if expense.split_policy == SplitPolicy.AMOUNT:
            raise ValidationError(
                "Splits must be provided when changing the amount of an AMOUNT split",
                field="splits",
            )
        current, _ = await _load_children(db, expense.id)
        shares = [
            ShareInput(user_id=s.user_id, percentage=to_money(s.percentage), amount=to_money(s.amount))
            for s in current
        ]

    calculated = None
    if shares is not None:
        calculated = calculate_splits(new_amount, expense.split_policy, shares)

    try:
        expense.amount = new_amount
        if data.title is not None:
            expense.title = data.title
        if data.description is not None:
            expense.description = data.description
        if data.currency is not None:
            expense.currency = data.currency

        if calculated is not None:
            await db.execute(delete(ExpenseSplit).where(ExpenseSplit.expense_id == expense.id))
            await db.execute(delete(Debt).where(Debt.expense_id == expense.id))

            splits = _build_splits(expense.id, calculated)
            db.add_all(splits)
            db.add_all(generate_debts(expense.id, expense.paid_by, splits))

        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Failed to update expense %s", expense_id)
        raise PersistenceError() from e

    log_business_event(
        "EXPENSE_UPDATED", user_id, "UPDATE_EXPENSE", "SUCCESS",
        expense_id=expense.id, group_id=expense.group_id,
        splits_recalculated=calculated is not None,
    )

    splits, debts = await _load_children(db, expense.id)
    return _serialize(expense, splits, debts)

async def delete_expense(db: AsyncSession, user_id: int, expense_id: int):
    expense = await _get_live_expense(db, expense_id)

    if not await _can_modify(db, expense, user_id):
        raise AuthorizationError("You cannot delete this expense", field="expense_id")

    try:
        expense.is_deleted = True
        await db.execute(
            update(ExpenseSplit)
            .where(ExpenseSplit.expense_id == expense_id)
            .values(is_deleted=True)
        )
        await db.execute(
            update(Debt)
            .where(Debt.expense_id == expense_id)
            .values(is_deleted=True)
        )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Failed to delete expense %s", expense_id)
        raise PersistenceError() from e

    log_business_event(
        "EXPENSE_DELETED", user_id, "DELETE_EXPENSE", "SUCCESS",
        expense_id=expense_id, group_id=expense.group_id,
    )
    return {"status": "deleted"}

async def get_expense_by_id(db: AsyncSession, expense_id: int, user_id: int):
    expense = await _get_live_expense(db, expense_id)

    if not await is_active_member(db, expense.group_id, user_id):
        raise AuthorizationError("Unauthorized access", field="expense_id")

    splits, debts = await _load_children(db, expense.id)
    return _serialize(expense, splits, debts)

async def list_group_expenses(db: AsyncSession, group_id: int, user_id: int):
    await get_group(db, group_id)

    if not await is_active_member(db, group_id, user_id):
        raise AuthorizationError("Unauthorized Access", field="group_id")

    expense_q = (
        select(Expense)
        .where(Expense.group_id == group_id, Expense.is_deleted == False)
        .order_by(Expense.created_at, Expense.id)
    )
    expense_res = await db.execute(expense_q)
    expenses = expense_res.scalars().all()

    if not expenses:
        return []

    expense_ids = [e.id for e in expenses]

    splits_res = await db.execute(
        select(ExpenseSplit).where(
            ExpenseSplit.expense_id.in_(expense_ids),
            ExpenseSplit.is_deleted == False,
        )
    )
    debts_res = await db.execute(
        select(Debt)
        .where(Debt.expense_id.in_(expense_ids), Debt.is_deleted == False)
        .order_by(Debt.id)
    )

    splits_map, debts_map = {}, {}
    for s in splits_res.scalars().all():
        splits_map.setdefault(s.expense_id, []).append(s)
    for d in debts_res.scalars().all():
        debts_map.setdefault(d.expense_id, []).append(d)

    return [
        _serialize(e, splits_map.get(e.id, []), debts_map.get(e.id, []))
        for e in expenses
    ]
