from typing import List, Optional

from pydantic import Field, StrictBool, field_validator

from membership.models.resource import DayOfWeek, Resource, ResourceCategory
from membership.schemas.common import CamelModel, require_text


def _allowed(enum_cls) -> str:
    return ", ".join(member.value for member in enum_cls)


class AvailabilityTimeIn(CamelModel):
    day_of_week: DayOfWeek
    start_time: str
    end_time: str

    @field_validator("day_of_week", mode="before")
    @classmethod
    def _day_of_week(cls, value):
        if not isinstance(value, str):
            raise ValueError("Day of week must be a string")
        try:
            return DayOfWeek(value.strip().upper())
        except ValueError:
            raise ValueError(f"Invalid day of week. Must be one of: {_allowed(DayOfWeek)}") from None

    @field_validator("start_time", mode="before")
    @classmethod
    def _start_time(cls, value):
        return require_text(value, "Start time")

    @field_validator("end_time", mode="before")
    @classmethod
    def _end_time(cls, value):
        return require_text(value, "End time")


class ResourceCreate(CamelModel):
    name: str
    description: Optional[str] = None
    availability_time: List[AvailabilityTimeIn] = Field(min_length=1, max_length=7)
    category: ResourceCategory
    assigned_employees_ids: List[str] = Field(min_length=1)
    requires_booking_approval: StrictBool

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value):
        return require_text(value, "Name")

    @field_validator("category", mode="before")
    @classmethod
    def _category(cls, value):
        require_text(value, "Category")
        try:
            return ResourceCategory(value.strip().upper())
        except ValueError:
            raise ValueError(f"Invalid category. Must be one of: {_allowed(ResourceCategory)}") from None

    @field_validator("availability_time")
    @classmethod
    def _distinct_days(cls, value):
        days = [item.day_of_week for item in value]
        if len(set(days)) != len(days):
            raise ValueError("Availability time cannot have the same day of week more than once")
        return value


class AvailabilityTimeView(CamelModel):
    day_of_week: str
    start_time: str
    end_time: str


class AssignedEmployeeView(CamelModel):
    employee_id: str


class ResourceView(CamelModel):
    id: str
    name: str
    description: Optional[str]
    availability_time: List[AvailabilityTimeView]
    category: str
    requires_booking_approval: bool
    assigned_employees: List[AssignedEmployeeView]

    @classmethod
    def from_model(cls, resource: Resource, assigned_employee_ids: List[str]) -> "ResourceView":
        return cls(
            id=resource.id,
            name=resource.name,
            description=resource.description,
            availability_time=[
                AvailabilityTimeView(
                    day_of_week=slot.day_of_week,
                    start_time=slot.start_time,
                    end_time=slot.end_time,
                )
                for slot in resource.availability_time
            ],
            category=resource.category,
            requires_booking_approval=bool(resource.requires_booking_approval),
            assigned_employees=[AssignedEmployeeView(employee_id=eid) for eid in assigned_employee_ids],
        )
