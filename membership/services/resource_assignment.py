"""Resource creation with best-effort employee assignment.

Callers submit arbitrary employee-record ids. They are deduplicated (first
occurrence wins), each is checked against the target company, and only the
valid ones are linked. Invalid ids are reported back once each. If nothing
validates, the resource is not created at all.
"""
import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from membership.core.authorization import capabilities_for
from membership.core.outcomes import ErrorKind, Failure, Outcome, Success, validation_failure
from membership.database import session_scope
from membership.models.resource import Resource, ResourceAvailability
from membership.schemas.resource import ResourceCreate, ResourceView
from membership.services.repositories import CompanyEmployeeRepository, Repositories, ResourceRepository

logger = logging.getLogger(__name__)

NO_VALID_EMPLOYEES = "No valid employees found"


def dedupe(ids: Iterable[str]) -> List[str]:
    seen = set()
    unique = []
    for value in ids:
        if value in seen:
            continue
        seen.add(value)
        unique.append(value)
    return unique


@dataclass(frozen=True)
class Partition:
    accepted: List[str]
    rejected: List[str]


def partition_members(ids: Iterable[str], company_id: str, employees: CompanyEmployeeRepository) -> Partition:
    """An id is valid iff a CompanyEmployee with that id belongs to the company."""
    accepted, rejected = [], []
    for employee_id in dedupe(ids):
        employee = employees.get_by_id(employee_id)
        if employee is not None and str(employee.company_id) == str(company_id):
            accepted.append(employee_id)
        else:
            rejected.append(employee_id)
    return Partition(accepted=accepted, rejected=rejected)


@dataclass
class AssignmentResult:
    resource: Resource
    linked: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


def link_employees(resources: ResourceRepository, db: Session, resource: Resource, employee_ids: List[str]) -> AssignmentResult:
    """Each link runs in its own savepoint; a failing link is recorded, not raised."""
    result = AssignmentResult(resource=resource)
    for employee_id in employee_ids:
        try:
            with db.begin_nested():
                resources.link_employee(resource_id=resource.id, company_employee_id=employee_id)
        except SQLAlchemyError:
            logger.warning(
                "Failed to link employee to resource",
                exc_info=True,
                extra={"resource_id": resource.id, "employee_id": employee_id},
            )
            result.failed.append(employee_id)
            continue
        result.linked.append(employee_id)
    return result


def assign_and_create(
    repos: Repositories,
    db: Session,
    *,
    company_id: str,
    payload: ResourceCreate,
) -> Outcome:
    partition = partition_members(payload.assigned_employees_ids, company_id, repos.employees)
    if not partition.accepted:
        return validation_failure(NO_VALID_EMPLOYEES, "assignedEmployeesIds")

    resource = Resource(
        company_id=str(company_id),
        name=payload.name,
        description=payload.description,
        category=payload.category.value,
        requires_booking_approval=payload.requires_booking_approval,
        availability_time=[
            ResourceAvailability(
                day_of_week=slot.day_of_week.value,
                start_time=slot.start_time,
                end_time=slot.end_time,
            )
            for slot in payload.availability_time
        ],
    )
    repos.resources.add(resource)

    result = link_employees(repos.resources, db, resource, partition.accepted)
    failed = partition.rejected + result.failed

    logger.info(
        "Resource created",
        extra={
            "resource_id": resource.id,
            "company_id": str(company_id),
            "linked": len(result.linked),
            "failed": len(failed),
        },
    )

    data = {"resource": ResourceView.from_model(resource, result.linked).to_wire()}
    if failed:
        data["failedResourceEmployeeAssignments"] = [{"employeeId": employee_id} for employee_id in failed]
    return Success(data=data, status_code=201)


def create_company_resource(
    *,
    company_id: str,
    acting_user_id: str,
    payload: ResourceCreate,
    db: Optional[Session] = None,
) -> Outcome:
    with session_scope(db) as session:
        repos = Repositories.for_session(session)

        if repos.companies.get(company_id) is None:
            return Failure(ErrorKind.NOT_FOUND, "Company not found")

        actor = repos.employees.get_membership(company_id, acting_user_id)
        if actor is None:
            return Failure(ErrorKind.AUTHORIZATION, "User must be an employee of the company")
        if not capabilities_for(actor.role).can_create_resource:
            return Failure(ErrorKind.AUTHORIZATION, "You are not authorized to create a resource")

        return assign_and_create(repos, session, company_id=company_id, payload=payload)
