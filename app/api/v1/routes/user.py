from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.session import get_db
from app.core.dependencies import get_current_user
from app.core.exceptions import AuthorizationError
from app.schemas.balances import UserBalanceOut
from app.schemas.settlement import SettlementHistoryOut, SettlementSummaryOut, SettlementAnalyticsOut
from app.services.balance_services import get_user_net_balance
from app.services.analytics_service import (
    authorize_scope,
    get_settlement_history,
    get_settlement_summary,
    get_settlement_analytics,
)

router = APIRouter()

@router.get("/{user_id}/settlements/history", response_model=SettlementHistoryOut)
async def user_settlement_history(
    user_id: int,
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    await authorize_scope(db, current_user.id, user_id=user_id)
    return await get_settlement_history(db, user_id=user_id, page=page, size=size)

@router.get("/{user_id}/settlements/summary", response_model=SettlementSummaryOut)
async def user_settlement_summary(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    await authorize_scope(db, current_user.id, user_id=user_id)
    return await get_settlement_summary(db, user_id=user_id)

@router.get("/{user_id}/settlements/analytics", response_model=SettlementAnalyticsOut)
async def user_settlement_analytics(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    await authorize_scope(db, current_user.id, user_id=user_id)
    return await get_settlement_analytics(db, user_id=user_id)

@router.get("/{user_id}/balance", response_model=UserBalanceOut)
async def user_balance(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    if user_id != current_user.id:
        raise AuthorizationError("Users can only view their own balance", field="user_id")
    return await get_user_net_balance(db, user_id)
