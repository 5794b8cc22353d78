from typing import Optional

from fastapi import APIRouter, Depends, Query

from membership.core.authorization import Role
from membership.core.outcomes import validation_failure
from membership.core.pagination import Pagination
from membership.core.responses import respond
from membership.deps.auth import require_auth
from membership.deps.pagination import pagination_params
from membership.schemas.company import CompanyCreate
from membership.services import company_service

router = APIRouter(prefix="/v1/companies", tags=["Companies"])


@router.get("")
def list_companies(
    pagination: Pagination = Depends(pagination_params),
    employee_id: Optional[str] = Query(None, alias="employeeId"),
    employee_role: Optional[str] = Query(None, alias="employeeRole"),
    _user_id: str = Depends(require_auth),
):
    role = None
    if employee_role is not None:
        role = Role.parse(employee_role)
        if role is None:
            allowed = ", ".join(r.value for r in Role)
            return respond(validation_failure(f"Invalid role. Must be one of: {allowed}", "employeeRole"))

    return respond(
        company_service.list_companies(
            pagination=pagination,
            employee_id=employee_id,
            employee_role=role,
        )
    )


@router.get("/{company_id}")
def get_company(company_id: str, _user_id: str = Depends(require_auth)):
    return respond(company_service.get_company(company_id=company_id))


@router.post("", status_code=201)
def create_company(payload: CompanyCreate, user_id: str = Depends(require_auth)):
    return respond(company_service.create_company(created_by_id=user_id, payload=payload))
