from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.session import Base
from app.core.utils import utcnow
from app.models.enums import GroupType, SettlementMode

class Group(Base):
    __tablename__ = 'groups'

    id = Column(Integer, primary_key=True, index = True)
    name = Column(String, nullable=False)
    created_by = Column(Integer, ForeignKey("users.id"))
    group_type = Column(Enum(GroupType, name="group_type"), nullable=False, default=GroupType.GROUP)
    settlement_type = Column(
        Enum(SettlementMode, name="settlement_mode"),
        nullable=False,
        default=SettlementMode.DETAILED,
    )
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    members = relationship("GroupMember", back_populates="group", cascade="all, delete")
