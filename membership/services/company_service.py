import logging
from typing import Optional

from sqlalchemy.orm import Session

from membership.core.authorization import Role
from membership.core.outcomes import ErrorKind, Failure, Outcome, Success
from membership.core.pagination import Pagination, pagination_metadata
from membership.database import session_scope
from membership.models.company import Company
from membership.schemas.company import CompanyCreate, CompanyView
from membership.services.repositories import Repositories

logger = logging.getLogger(__name__)


def create_company(*, created_by_id: str, payload: CompanyCreate, db: Optional[Session] = None) -> Outcome:
    """The creator becomes the company's OWNER in the same transaction."""
    with session_scope(db) as session:
        repos = Repositories.for_session(session)

        company = repos.companies.add(
            Company(
                name=payload.name,
                country=payload.country,
                county=payload.county,
                city=payload.city,
                street=payload.street,
                postal_code=payload.postal_code,
                latitude=payload.latitude,
                longitude=payload.longitude,
                created_by_id=str(created_by_id),
            )
        )
        owner = repos.employees.add(company_id=company.id, user_id=created_by_id, role=Role.OWNER)

        logger.info(
            "Company created",
            extra={"company_id": company.id, "created_by_id": str(created_by_id), "owner_employee_id": owner.id},
        )
        return Success(data={"company": CompanyView.from_model(company).to_wire()}, status_code=201)


def get_company(*, company_id: str, db: Optional[Session] = None) -> Outcome:
    with session_scope(db) as session:
        company = Repositories.for_session(session).companies.get(company_id)
        if company is None:
            return Failure(ErrorKind.NOT_FOUND, "Company not found")
        return Success(data={"company": CompanyView.from_model(company).to_wire()})


def list_companies(
    *,
    pagination: Pagination,
    employee_id: Optional[str] = None,
    employee_role: Optional[Role] = None,
    db: Optional[Session] = None,
) -> Outcome:
    with session_scope(db) as session:
        companies = Repositories.for_session(session).companies

        rows = companies.list(
            skip=pagination.skip,
            take=pagination.take,
            employee_id=employee_id,
            employee_role=employee_role,
        )
        total_count = companies.count(employee_id=employee_id, employee_role=employee_role)

        return Success(
            data={
                "companies": [CompanyView.from_model(row).to_wire() for row in rows],
                "pagination": pagination_metadata(pagination.page, pagination.page_size, total_count).as_dict(),
            }
        )
