from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.session import get_db
from app.core.dependencies import get_current_user, check_group_membership
from app.models.enums import SettlementMode
from app.schemas.balances import GroupBalanceOut
from app.schemas.expense import ExpenseOut
from app.schemas.settlement import (
    AvailableSettlementsOut,
    SettlementExecuteRequest,
    SettlementExecutionOut,
    SettlementHistoryOut,
    SettlementSummaryOut,
    SettlementAnalyticsOut,
)
from app.services.balance_services import get_group_balances
from app.services.expense_services import list_group_expenses
from app.services.membership import get_group
from app.services.settlement_service import get_available_settlements, execute_settlements
from app.services.analytics_service import (
    authorize_scope,
    get_settlement_history,
    get_settlement_summary,
    get_settlement_analytics,
)

router = APIRouter()

@router.get("/{group_id}/expenses", response_model=list[ExpenseOut], description="get all expenses of the group")
async def fetch_expenses(
    group_id: int,
    db: AsyncSession = Depends(get_db),
    user = Depends(get_current_user)
):
    return await list_group_expenses(db, group_id, user.id)

@router.get("/{group_id}/settlements/available", response_model=AvailableSettlementsOut)
async def available_settlements(
    group_id: int,
    mode: Optional[SettlementMode] = None,
    db: AsyncSession = Depends(get_db),
    user = Depends(get_current_user)
):
    return await get_available_settlements(db, group_id, mode, user.id)

@router.post("/{group_id}/settlements/execute", response_model=SettlementExecutionOut)
async def execute(
    group_id: int,
    data: SettlementExecuteRequest,
    db: AsyncSession = Depends(get_db),
    user = Depends(get_current_user)
):
    return await execute_settlements(db, group_id, data, user.id)

@router.get("/{group_id}/settlements/history", response_model=SettlementHistoryOut)
async def settlement_history(
    group_id: int,
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    user = Depends(get_current_user)
):
    await authorize_scope(db, user.id, group_id=group_id)
    return await get_settlement_history(db, group_id=group_id, page=page, size=size)

@router.get("/{group_id}/settlements/summary", response_model=SettlementSummaryOut)
async def settlement_summary(
    group_id: int,
    db: AsyncSession = Depends(get_db),
    user = Depends(get_current_user)
):
    await authorize_scope(db, user.id, group_id=group_id)
    return await get_settlement_summary(db, group_id=group_id)

@router.get("/{group_id}/settlements/analytics", response_model=SettlementAnalyticsOut)
async def settlement_analytics(
    group_id: int,
    db: AsyncSession = Depends(get_db),
    user = Depends(get_current_user)
):
    await authorize_scope(db, user.id, group_id=group_id)
    return await get_settlement_analytics(db, group_id=group_id)

@router.get("/{group_id}/balances", response_model=GroupBalanceOut)
async def group_balances(
    group_id: int,
    db: AsyncSession = Depends(get_db),
    user = Depends(get_current_user)
):
    await get_group(db, group_id)
    await check_group_membership(db, group_id, user.id)
    return await get_group_balances(db, group_id)
