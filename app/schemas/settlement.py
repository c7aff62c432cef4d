from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from app.models.enums import SettlementMode, SettlementStatus

class SettlementTransactionOut(BaseModel):
    id: str
    from_user_id: int
    to_user_id: int
    amount: Decimal
    mode: SettlementMode
    status: SettlementStatus
    group_id: int
    executed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class AvailableSettlementsOut(BaseModel):
    group_id: int
    mode: SettlementMode
    transactions: List[SettlementTransactionOut]
    count: int
    total_amount: Decimal

class SettlementExecuteRequest(BaseModel):
    transaction_ids: List[str] = Field(default_factory=list)
    settle_all: bool = False
    mode: Optional[SettlementMode] = None
    settled_at: Optional[datetime] = None
    payment_method: Optional[str] = Field(default=None, max_length=50)
    notes: Optional[str] = None

class SettlementExecutionOut(BaseModel):
    executed: List[SettlementTransactionOut]
    remaining: List[SettlementTransactionOut]
    total_settled_amount: Decimal
    executed_count: int
    remaining_count: int
    group_id: int
    mode: SettlementMode
    timestamp: datetime

class SettlementSummaryOut(BaseModel):
    group_id: Optional[int] = None
    user_id: Optional[int] = None
    total_debts: int
    settled_debts: int
    unsettled_debts: int
    total_amount: Decimal
    settled_amount: Decimal
    unsettled_amount: Decimal
    last_settlement_date: Optional[datetime] = None

class SettlementAnalyticsOut(BaseModel):
    group_id: Optional[int] = None
    user_id: Optional[int] = None
    total_settlements: int
    settled_count: int
    unsettled_count: int
    total_settled_amount: Decimal
    total_unsettled_amount: Decimal
    average_settlement_time_hours: float

class SettlementHistoryItem(BaseModel):
    debt_id: int
    group_id: int
    expense_id: int
    expense_title: Optional[str] = None
    debtor_id: int
    debtor_name: Optional[str] = None
    creditor_id: int
    creditor_name: Optional[str] = None
    amount: Decimal
    currency: Optional[str] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    is_settled: bool
    settled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    settlement_hours: Optional[float] = None

class SettlementHistoryOut(BaseModel):
    items: List[SettlementHistoryItem]
    page: int
    size: int
    total: int
    has_next: bool
