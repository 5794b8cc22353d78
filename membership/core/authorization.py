from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Role(Enum):
    OWNER = "OWNER"
    MANAGER = "MANAGER"
    REGULAR = "REGULAR"

    @classmethod
    def parse(cls, value) -> Optional["Role"]:
        if isinstance(value, Role):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return None


@dataclass(frozen=True)
class Capabilities:
    can_invite_employee_to_company: bool = False
    can_cancel_employee_to_company_invitation: bool = False
    can_create_resource: bool = False


_CAPABILITIES = {
    Role.OWNER: Capabilities(
        can_invite_employee_to_company=True,
        can_cancel_employee_to_company_invitation=True,
        can_create_resource=True,
    ),
    Role.MANAGER: Capabilities(can_create_resource=True),
    Role.REGULAR: Capabilities(),
}


def capabilities_for(role) -> Capabilities:
    """Capability lookup for a company role. Unknown roles get nothing."""
    parsed = Role.parse(role)
    if parsed is None:
        return Capabilities()
    return _CAPABILITIES[parsed]
