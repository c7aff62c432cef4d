from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Numeric, Boolean, Enum, Text
from sqlalchemy.sql import func, false
from sqlalchemy.orm import relationship
from app.db.session import Base
from app.core.utils import utcnow
from app.models.enums import SplitPolicy

class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)
    paid_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    title = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(10), nullable=False)
    split_policy = Column(Enum(SplitPolicy, name="split_policy"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
    is_deleted = Column(Boolean, nullable=False, default=False, server_default=false())


    splits = relationship("ExpenseSplit", back_populates="expense", cascade="all, delete")
    debts = relationship("Debt", back_populates="expense", cascade="all, delete")
