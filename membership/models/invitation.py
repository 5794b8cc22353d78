import uuid
from enum import Enum

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, String

from membership.core.clock import utcnow
from membership.database import Base


class InvitationStatus(Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"


class CompanyEmployeeInvitation(Base):
    __tablename__ = "company_employee_invitations"

    __table_args__ = (
        CheckConstraint(
            "status in ('PENDING','ACCEPTED','DECLINED','CANCELLED','EXPIRED')",
            name="ck_company_employee_invitations_status_valid",
        ),
        CheckConstraint(
            "role in ('OWNER','MANAGER','REGULAR')",
            name="ck_company_employee_invitations_role_valid",
        ),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    sender_id = Column(String, ForeignKey("company_employees.id"), nullable=False, index=True)
    invited_user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    role = Column(String, nullable=False)
    status = Column(String, nullable=False, default=InvitationStatus.PENDING.value, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
