from fastapi import APIRouter, Depends

from membership.core.responses import respond
from membership.deps.auth import require_auth
from membership.schemas.resource import ResourceCreate
from membership.services import resource_assignment

router = APIRouter(prefix="/v1/companies/{company_id}/resources", tags=["Resources"])


@router.post("", status_code=201)
def create_company_resource(company_id: str, payload: ResourceCreate, user_id: str = Depends(require_auth)):
    return respond(
        resource_assignment.create_company_resource(
            company_id=company_id,
            acting_user_id=user_id,
            payload=payload,
        )
    )
