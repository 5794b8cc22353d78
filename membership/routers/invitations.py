from fastapi import APIRouter, Depends

from membership.core.responses import respond
from membership.deps.auth import require_auth
from membership.schemas.invitation import InvitationCreate
from membership.services import invitation_service

router = APIRouter(prefix="/v1/companies/{company_id}/invitations", tags=["Invitations"])


@router.post("", status_code=201)
def invite_employee(company_id: str, payload: InvitationCreate, user_id: str = Depends(require_auth)):
    return respond(
        invitation_service.invite_employee(
            company_id=company_id,
            sender_user_id=user_id,
            invited_user_id=payload.invited_user_id,
            role=payload.role,
        )
    )


@router.patch("/{invitation_id}/accept")
def accept_invitation(company_id: str, invitation_id: str, user_id: str = Depends(require_auth)):
    return respond(
        invitation_service.accept_invitation(
            company_id=company_id,
            invitation_id=invitation_id,
            acting_user_id=user_id,
        )
    )


@router.patch("/{invitation_id}/decline")
def decline_invitation(company_id: str, invitation_id: str, user_id: str = Depends(require_auth)):
    return respond(
        invitation_service.decline_invitation(
            company_id=company_id,
            invitation_id=invitation_id,
            acting_user_id=user_id,
        )
    )


@router.patch("/{invitation_id}/cancel")
def cancel_invitation(company_id: str, invitation_id: str, user_id: str = Depends(require_auth)):
    return respond(
        invitation_service.cancel_invitation(
            company_id=company_id,
            invitation_id=invitation_id,
            acting_user_id=user_id,
        )
    )
