from sqlalchemy import Column, Integer, ForeignKey, DateTime, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.session import Base
from app.core.utils import utcnow
from app.models.enums import MemberRole, MemberStatus

class GroupMember(Base):
    __tablename__ = "group_members"

    group_id = Column(Integer, ForeignKey("groups.id"), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    role = Column(Enum(MemberRole, name="member_role"), nullable=False, default=MemberRole.MEMBER)
    status = Column(Enum(MemberStatus, name="member_status"), nullable=False, default=MemberStatus.ACTIVE)
    joined_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    group = relationship("Group", back_populates="members")
