from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel

class NetBalanceOut(BaseModel):
    user_id: int
    name: Optional[str] = None
    balance: Decimal

class PlannedTransfer(BaseModel):
    from_id: int
    from_name: Optional[str] = None
    to_id: int
    to_name: Optional[str] = None
    amount: Decimal

class GroupBalanceOut(BaseModel):
    group_id: int
    net: List[NetBalanceOut]
    settlements: List[PlannedTransfer]

class UserBalanceOut(BaseModel):
    user_id: int
    total_owed_to_user: Decimal
    total_user_owes: Decimal
    net_balance: Decimal
