from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Numeric, Boolean, Enum, Text, CheckConstraint
from sqlalchemy.sql import func, false
from sqlalchemy.orm import relationship
from app.db.session import Base
from app.core.utils import utcnow
from app.models.enums import CreditorKind

class Debt(Base):
    __tablename__ = "debts"
    __table_args__ = (
        CheckConstraint("debtor_id <> creditor_id", name="ck_debts_no_self_debt"),
    )

    id = Column(Integer, primary_key=True, index=True)
    debtor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    creditor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    creditor_kind = Column(Enum(CreditorKind, name="creditor_kind"), nullable=False, default=CreditorKind.USER)
    amount = Column(Numeric(10, 2), nullable=False)
    expense_id = Column(Integer, ForeignKey("expenses.id"), nullable=False, index=True)
    payment_method = Column(String(50), nullable=True)
    notes = Column(Text, nullable=True)
    settled_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
    is_deleted = Column(Boolean, nullable=False, default=False, server_default=false())

    expense = relationship("Expense", back_populates="debts")

    @property
    def is_settled(self) -> bool:
        return self.settled_at is not None

    def mark_settled(self, settled_at, payment_method=None, notes=None):
        self.settled_at = settled_at
        self.payment_method = payment_method
        self.notes = notes
