import uuid
from enum import Enum

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from membership.core.clock import utcnow
from membership.database import Base


class DayOfWeek(Enum):
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"


class ResourceCategory(Enum):
    BEAUTY = "BEAUTY"
    HEALTH = "HEALTH"
    SPORTS = "SPORTS"
    EDUCATION = "EDUCATION"
    ENTERTAINMENT = "ENTERTAINMENT"
    OTHER = "OTHER"


def _sql_in(values) -> str:
    return ",".join(f"'{v.value}'" for v in values)


class Resource(Base):
    __tablename__ = "resources"

    __table_args__ = (
        CheckConstraint(f"category in ({_sql_in(ResourceCategory)})", name="ck_resources_category_valid"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    company_id = Column(String, ForeignKey("companies.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=False)
    requires_booking_approval = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    availability_time = relationship(
        "ResourceAvailability",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class ResourceAvailability(Base):
    __tablename__ = "resource_availabilities"

    __table_args__ = (
        UniqueConstraint("resource_id", "day_of_week", name="uq_resource_availabilities_resource_day"),
        CheckConstraint(f"day_of_week in ({_sql_in(DayOfWeek)})", name="ck_resource_availabilities_day_valid"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    resource_id = Column(String, ForeignKey("resources.id", ondelete="CASCADE"), nullable=False, index=True)
    day_of_week = Column(String, nullable=False)
    start_time = Column(String, nullable=False)
    end_time = Column(String, nullable=False)


class ResourceEmployee(Base):
    __tablename__ = "resource_employees"

    __table_args__ = (
        UniqueConstraint("resource_id", "employee_id", name="uq_resource_employees_resource_employee"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    resource_id = Column(String, ForeignKey("resources.id", ondelete="CASCADE"), nullable=False, index=True)
    # CompanyEmployee.id, not a user id
    employee_id = Column(String, ForeignKey("company_employees.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
