"""Invitation use cases: invite, accept, decline, cancel.

Each use case loads what it needs through the repositories, consults the
authorization policy where the operation is role-gated, lets the state
machine decide, and writes in one transaction.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from membership.core.authorization import Role, capabilities_for
from membership.core.clock import utcnow
from membership.core.outcomes import ErrorKind, Failure, Outcome, Success, validation_failure
from membership.database import session_scope
from membership.models.invitation import CompanyEmployeeInvitation
from membership.schemas.invitation import CreatedInvitationView, EmployeeView, InvitationView
from membership.services import invitation_state_machine as machine
from membership.services.invitation_state_machine import Decision, InvitationFacts, Transition, Verdict
from membership.services.repositories import Repositories

logger = logging.getLogger(__name__)

COMPANY_NOT_FOUND = "Company not found"
INVITATION_NOT_FOUND = "Invitation not found"


def _existing(invitation: CompanyEmployeeInvitation, message: str) -> Success:
    return Success(
        data={"existingInvitation": InvitationView.from_model(invitation).to_wire()},
        message=message,
    )


def _rejected(decision: Decision) -> Failure:
    return Failure(kind=decision.kind, message=decision.message)


def invite_employee(
    *,
    company_id: str,
    sender_user_id: str,
    invited_user_id: str,
    role: Role,
    now: Optional[datetime] = None,
    db: Optional[Session] = None,
) -> Outcome:
    """
    Preconditions are read-then-write without locking; two concurrent invites
    for the same pair can both pass. The store is the only hard guard.
    """
    if now is None:
        now = utcnow()

    with session_scope(db) as session:
        repos = Repositories.for_session(session)

        if repos.companies.get(company_id) is None:
            return Failure(ErrorKind.NOT_FOUND, COMPANY_NOT_FOUND)

        sender = repos.employees.get_membership(company_id, sender_user_id)
        if sender is None:
            return Failure(ErrorKind.NOT_FOUND, "Sender must be an employee of the company")
        if not capabilities_for(sender.role).can_invite_employee_to_company:
            return Failure(ErrorKind.AUTHORIZATION, "You are not authorized to invite employees to this company")

        if str(invited_user_id) == str(sender_user_id):
            return validation_failure("You cannot invite yourself to a company", "invitedUserId")

        if repos.users.get(invited_user_id) is None:
            return Failure(ErrorKind.NOT_FOUND, "Invited user not found")

        if repos.employees.get_membership(company_id, invited_user_id) is not None:
            return Failure(ErrorKind.CONFLICT, "This user is already an employee of this company")

        pending = repos.invitations.find_pending(sender_id=sender.id, invited_user_id=invited_user_id, now=now)
        if pending is not None:
            return Failure(ErrorKind.CONFLICT, "This user already has a pending invitation")

        invitation = repos.invitations.add(
            machine.open_invitation(
                sender_id=sender.id,
                invited_user_id=str(invited_user_id),
                role=role,
                now=now,
            )
        )

        logger.info(
            "Invitation created",
            extra={
                "invitation_id": invitation.id,
                "company_id": str(company_id),
                "sender_id": sender.id,
                "invited_user_id": str(invited_user_id),
                "role": role.value,
                "expires_in_ms": machine.INVITATION_TTL_MS,
            },
        )

        view = CreatedInvitationView(
            **InvitationView.from_model(invitation).model_dump(),
            expires_in=str(machine.INVITATION_TTL_MS),
        )
        return Success(data={"invitation": view.to_wire()}, message="Invitation sent", status_code=201)


def accept_invitation(
    *,
    company_id: str,
    invitation_id: str,
    acting_user_id: str,
    now: Optional[datetime] = None,
    db: Optional[Session] = None,
) -> Outcome:
    if now is None:
        now = utcnow()

    with session_scope(db) as session:
        repos = Repositories.for_session(session)

        if repos.companies.get(company_id) is None:
            return Failure(ErrorKind.NOT_FOUND, COMPANY_NOT_FOUND)

        invitation = repos.invitations.get_in_company(invitation_id, company_id)
        if invitation is None:
            return Failure(ErrorKind.NOT_FOUND, INVITATION_NOT_FOUND)

        facts = InvitationFacts.of(
            invitation,
            acting_user_id=acting_user_id,
            now=now,
            actor_is_member=repos.employees.get_membership(company_id, acting_user_id) is not None,
        )
        decision = machine.decide(Transition.ACCEPT, facts)

        if decision.verdict is Verdict.UNCHANGED:
            return _existing(invitation, decision.message)
        if decision.verdict is Verdict.REJECT:
            return _rejected(decision)

        try:
            with session.begin_nested():
                employee = repos.employees.add(
                    company_id=company_id,
                    user_id=acting_user_id,
                    role=Role(invitation.role),
                )
                machine.apply_decision(invitation, decision)
                repos.invitations.save(invitation)
        except IntegrityError:
            logger.warning(
                "Invitation accept lost a membership race",
                extra={"invitation_id": invitation.id, "company_id": str(company_id), "user_id": str(acting_user_id)},
            )
            return Failure(ErrorKind.CONFLICT, machine.ALREADY_EMPLOYEE)

        logger.info(
            "Invitation accepted",
            extra={
                "invitation_id": invitation.id,
                "company_id": str(company_id),
                "user_id": str(acting_user_id),
                "company_employee_id": employee.id,
            },
        )

        return Success(
            data={
                "invitation": InvitationView.from_model(invitation).to_wire(),
                "employee": EmployeeView.from_model(employee).to_wire(),
            },
            message=decision.message,
        )


def decline_invitation(
    *,
    company_id: str,
    invitation_id: str,
    acting_user_id: str,
    now: Optional[datetime] = None,
    db: Optional[Session] = None,
) -> Outcome:
    if now is None:
        now = utcnow()

    with session_scope(db) as session:
        repos = Repositories.for_session(session)

        if repos.companies.get(company_id) is None:
            return Failure(ErrorKind.NOT_FOUND, COMPANY_NOT_FOUND)

        invitation = repos.invitations.get_in_company(invitation_id, company_id)
        if invitation is None:
            return Failure(ErrorKind.NOT_FOUND, INVITATION_NOT_FOUND)

        decision = machine.decide(
            Transition.DECLINE,
            InvitationFacts.of(invitation, acting_user_id=acting_user_id, now=now),
        )
        if decision.verdict is Verdict.REJECT:
            return _rejected(decision)

        machine.apply_decision(invitation, decision)
        repos.invitations.save(invitation)

        logger.info(
            "Invitation declined",
            extra={"invitation_id": invitation.id, "company_id": str(company_id), "user_id": str(acting_user_id)},
        )
        return Success(data={"invitation": InvitationView.from_model(invitation).to_wire()}, message=decision.message)


def cancel_invitation(
    *,
    company_id: str,
    invitation_id: str,
    acting_user_id: str,
    now: Optional[datetime] = None,
    db: Optional[Session] = None,
) -> Outcome:
    if now is None:
        now = utcnow()

    with session_scope(db) as session:
        repos = Repositories.for_session(session)

        if repos.companies.get(company_id) is None:
            return Failure(ErrorKind.NOT_FOUND, COMPANY_NOT_FOUND)

        actor = repos.employees.get_membership(company_id, acting_user_id)
        if actor is None or not capabilities_for(actor.role).can_cancel_employee_to_company_invitation:
            return Failure(ErrorKind.AUTHORIZATION, "You must be an owner of the company")

        invitation = repos.invitations.get_in_company(invitation_id, company_id)
        if invitation is None:
            return Failure(ErrorKind.NOT_FOUND, INVITATION_NOT_FOUND)

        decision = machine.decide(
            Transition.CANCEL,
            InvitationFacts.of(invitation, acting_user_id=acting_user_id, now=now),
        )
        if decision.verdict is Verdict.UNCHANGED:
            return _existing(invitation, decision.message)
        if decision.verdict is Verdict.REJECT:
            return _rejected(decision)

        machine.apply_decision(invitation, decision)
        repos.invitations.save(invitation)

        logger.info(
            "Invitation cancelled",
            extra={"invitation_id": invitation.id, "company_id": str(company_id), "user_id": str(acting_user_id)},
        )
        return Success(data={"invitation": InvitationView.from_model(invitation).to_wire()}, message=decision.message)
