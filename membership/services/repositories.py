"""Persistence ports, one repository per entity, over a SQLAlchemy session.

Repositories never commit; the use case that owns the session decides the
transaction boundary. Soft-deleted users and companies are filtered out
unless include_deleted is asked for.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import exists
from sqlalchemy.orm import Session

from membership.core.authorization import Role
from membership.models.company import Company
from membership.models.company_employee import CompanyEmployee
from membership.models.invitation import CompanyEmployeeInvitation, InvitationStatus
from membership.models.resource import Resource, ResourceEmployee
from membership.models.user import User
from membership.services.invitation_state_machine import blocks_new_invitation


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str, include_deleted: bool = False) -> Optional[User]:
        q = self.db.query(User).filter(User.id == str(user_id))
        if not include_deleted:
            q = q.filter(User.deleted_at.is_(None))
        return q.first()


class CompanyRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, company_id: str, include_deleted: bool = False) -> Optional[Company]:
        q = self.db.query(Company).filter(Company.id == str(company_id))
        if not include_deleted:
            q = q.filter(Company.deleted_at.is_(None))
        return q.first()

    def _filtered(self, employee_id: Optional[str], employee_role: Optional[Role]):
        q = self.db.query(Company).filter(Company.deleted_at.is_(None))

        if employee_id is not None or employee_role is not None:
            membership = exists().where(CompanyEmployee.company_id == Company.id)
            if employee_id is not None:
                membership = membership.where(CompanyEmployee.employee_id == str(employee_id))
            if employee_role is not None:
                membership = membership.where(CompanyEmployee.role == employee_role.value)
            q = q.filter(membership)

        return q

    def list(
        self,
        *,
        skip: int,
        take: int,
        employee_id: Optional[str] = None,
        employee_role: Optional[Role] = None,
    ) -> List[Company]:
        return (
            self._filtered(employee_id, employee_role)
            .order_by(Company.created_at.asc(), Company.id.asc())
            .offset(int(skip))
            .limit(int(take))
            .all()
        )

    def count(self, *, employee_id: Optional[str] = None, employee_role: Optional[Role] = None) -> int:
        return self._filtered(employee_id, employee_role).count()

    def add(self, company: Company) -> Company:
        self.db.add(company)
        self.db.flush()
        return company


class CompanyEmployeeRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, company_employee_id: str) -> Optional[CompanyEmployee]:
        return self.db.query(CompanyEmployee).filter(CompanyEmployee.id == str(company_employee_id)).first()

    def get_membership(self, company_id: str, user_id: str) -> Optional[CompanyEmployee]:
        return (
            self.db.query(CompanyEmployee)
            .filter(
                CompanyEmployee.company_id == str(company_id),
                CompanyEmployee.employee_id == str(user_id),
            )
            .first()
        )

    def add(self, *, company_id: str, user_id: str, role: Role) -> CompanyEmployee:
        row = CompanyEmployee(company_id=str(company_id), employee_id=str(user_id), role=role.value)
        self.db.add(row)
        self.db.flush()
        return row


class InvitationRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_in_company(self, invitation_id: str, company_id: str) -> Optional[CompanyEmployeeInvitation]:
        return (
            self.db.query(CompanyEmployeeInvitation)
            .join(CompanyEmployee, CompanyEmployee.id == CompanyEmployeeInvitation.sender_id)
            .filter(
                CompanyEmployeeInvitation.id == str(invitation_id),
                CompanyEmployee.company_id == str(company_id),
            )
            .first()
        )

    def find_pending(self, *, sender_id: str, invited_user_id: str, now: datetime) -> Optional[CompanyEmployeeInvitation]:
        rows = (
            self.db.query(CompanyEmployeeInvitation)
            .filter(
                CompanyEmployeeInvitation.sender_id == str(sender_id),
                CompanyEmployeeInvitation.invited_user_id == str(invited_user_id),
                CompanyEmployeeInvitation.status == InvitationStatus.PENDING.value,
            )
            .order_by(CompanyEmployeeInvitation.created_at.desc())
            .all()
        )
        for row in rows:
            if blocks_new_invitation(row, now):
                return row
        return None

    def add(self, invitation: CompanyEmployeeInvitation) -> CompanyEmployeeInvitation:
        self.db.add(invitation)
        self.db.flush()
        return invitation

    def save(self, invitation: CompanyEmployeeInvitation) -> CompanyEmployeeInvitation:
        self.db.flush()
        self.db.refresh(invitation)
        return invitation


class ResourceRepository:
    def __init__(self, db: Session):
        self.db = db

    def add(self, resource: Resource) -> Resource:
        # availability rows cascade with the resource
        self.db.add(resource)
        self.db.flush()
        return resource

    def link_employee(self, *, resource_id: str, company_employee_id: str) -> ResourceEmployee:
        row = ResourceEmployee(resource_id=str(resource_id), employee_id=str(company_employee_id))
        self.db.add(row)
        self.db.flush()
        return row


@dataclass
class Repositories:
    users: UserRepository
    companies: CompanyRepository
    employees: CompanyEmployeeRepository
    invitations: InvitationRepository
    resources: ResourceRepository

    @classmethod
    def for_session(cls, db: Session) -> "Repositories":
        return cls(
            users=UserRepository(db),
            companies=CompanyRepository(db),
            employees=CompanyEmployeeRepository(db),
            invitations=InvitationRepository(db),
            resources=ResourceRepository(db),
        )
