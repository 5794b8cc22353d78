from datetime import datetime

from pydantic import field_validator

from membership.core.authorization import Role
from membership.core.clock import as_utc
from membership.models.company_employee import CompanyEmployee
from membership.models.invitation import CompanyEmployeeInvitation
from membership.schemas.common import CamelModel, require_text


class InvitationCreate(CamelModel):
    invited_user_id: str
    role: Role

    @field_validator("invited_user_id", mode="before")
    @classmethod
    def _invited_user_id(cls, value):
        return require_text(value, "Invited user ID").strip()

    @field_validator("role", mode="before")
    @classmethod
    def _role(cls, value):
        require_text(value, "Role")
        role = Role.parse(value)
        if role is None:
            allowed = ", ".join(r.value for r in Role)
            raise ValueError(f"Invalid role. Must be one of: {allowed}")
        return role


class InvitationView(CamelModel):
    id: str
    sender_company_employee_id: str
    invited_user_id: str
    role: str
    status: str
    expires_at: datetime

    @classmethod
    def from_model(cls, invitation: CompanyEmployeeInvitation) -> "InvitationView":
        return cls(
            id=invitation.id,
            sender_company_employee_id=invitation.sender_id,
            invited_user_id=invitation.invited_user_id,
            role=invitation.role,
            status=invitation.status,
            expires_at=as_utc(invitation.expires_at),
        )


class CreatedInvitationView(InvitationView):
    # TTL in milliseconds, as a string
    expires_in: str


class EmployeeView(CamelModel):
    id: str
    company_id: str
    employee_id: str
    role: str

    @classmethod
    def from_model(cls, employee: CompanyEmployee) -> "EmployeeView":
        return cls(
            id=employee.id,
            company_id=employee.company_id,
            employee_id=employee.employee_id,
            role=employee.role,
        )
