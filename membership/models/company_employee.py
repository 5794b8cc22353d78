import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, String, UniqueConstraint

from membership.core.clock import utcnow
from membership.database import Base


class CompanyEmployee(Base):
    __tablename__ = "company_employees"

    __table_args__ = (
        UniqueConstraint("company_id", "employee_id", name="uq_company_employees_company_employee"),
        CheckConstraint("role in ('OWNER','MANAGER','REGULAR')", name="ck_company_employees_role_valid"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    company_id = Column(String, ForeignKey("companies.id"), nullable=False, index=True)
    # user id of the member
    employee_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    role = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
