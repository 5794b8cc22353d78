from membership.models.company import Company
from membership.models.company_employee import CompanyEmployee
from membership.models.invitation import CompanyEmployeeInvitation, InvitationStatus
from membership.models.resource import DayOfWeek, Resource, ResourceAvailability, ResourceCategory, ResourceEmployee
from membership.models.user import User

__all__ = [
    "Company",
    "CompanyEmployee",
    "CompanyEmployeeInvitation",
    "DayOfWeek",
    "InvitationStatus",
    "Resource",
    "ResourceAvailability",
    "ResourceCategory",
    "ResourceEmployee",
    "User",
]
