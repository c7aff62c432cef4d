from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from app.models.enums import SplitPolicy

class SplitInput(BaseModel):
    user_id: int
    percentage: Optional[Decimal] = Field(default=None, max_digits=5, decimal_places=2)
    amount: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)

class ExpenseCreate(BaseModel):
    group_id : int
    payer_id : Optional[int] = None
    amount : Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    currency : Optional[str] = Field(default=None, max_length=10)
    title : Optional[str] = Field(default=None, max_length=255)
    description : str | None = None
    split_policy : SplitPolicy = SplitPolicy.EQUAL
    splits: List[SplitInput] = Field(min_length=1)

class ExpenseUpdate(BaseModel):
    amount : Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    currency : Optional[str] = Field(default=None, max_length=10)
    title : Optional[str] = Field(default=None, max_length=255)
    description : str | None = None
    splits: Optional[List[SplitInput]] = Field(default=None, min_length=1)

class SplitOut(BaseModel):
    user_id: int
    percentage: Decimal
    amount: Decimal

class DebtOut(BaseModel):
    id: int
    debtor_id: int
    creditor_id: int
    amount: Decimal
    settled_at: Optional[datetime] = None

class ExpenseOut(BaseModel):
    id: int
    group_id: int
    paid_by: int
    created_by: int
    title: str | None = None
    description: str | None = None
    amount: Decimal
    currency: str
    split_policy: SplitPolicy
    created_at: Optional[datetime] = None
    splits : List[SplitOut]
    debts : List[DebtOut]

    model_config = ConfigDict(from_attributes=True)
