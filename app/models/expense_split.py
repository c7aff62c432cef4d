from sqlalchemy import Column, Integer, Numeric, ForeignKey, Boolean
from sqlalchemy.sql import false
from sqlalchemy.orm import relationship
from app.db.session import Base

class ExpenseSplit(Base):
    __tablename__ = "expense_splits"

    expense_id = Column(Integer, ForeignKey("expenses.id"), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    percentage = Column(Numeric(5, 2), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    is_deleted = Column(Boolean, nullable=False, default=False, server_default=false())

    expense = relationship("Expense", back_populates="splits")
