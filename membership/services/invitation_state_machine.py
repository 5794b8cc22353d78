"""Invitation lifecycle.

    PENDING -> ACCEPTED | DECLINED | CANCELLED | EXPIRED

Every right-hand state is terminal. EXPIRED is also reached without a write:
a PENDING invitation whose expires_at has passed is effectively expired.
Nothing rewrites stored statuses in the background, so the check is made
lazily every time an invitation is read for a transition.

Each transition is a guard table evaluated top to bottom; the first guard
that matches decides the outcome. The tables differ on purpose:

  * accept treats an already ACCEPTED invitation as a non-error read, then
    checks the clock before the other stored statuses;
  * decline checks the clock first and rejects every terminal status;
  * cancel treats DECLINED / CANCELLED / EXPIRED / time-expired as a
    non-error read and only rejects ACCEPTED.

The machine is role-agnostic. Whether the actor may cancel at all is decided
by the caller through the authorization policy.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from membership.core.authorization import Role
from membership.core.clock import as_utc
from membership.core.outcomes import ErrorKind
from membership.models.invitation import CompanyEmployeeInvitation, InvitationStatus

INVITATION_TTL = timedelta(weeks=1)
INVITATION_TTL_MS = int(INVITATION_TTL.total_seconds() * 1000)

ALREADY_ACCEPTED = "This invitation has already been accepted"
ALREADY_REJECTED = "This invitation has already been rejected"
ALREADY_CANCELLED = "This invitation has already been cancelled"
EXPIRED = "This invitation has expired"
NOT_ADDRESSED_TO_ACTOR = "No invitation found for this user"
ALREADY_EMPLOYEE = "User is already an employee of this company"


class Transition(Enum):
    ACCEPT = "accept"
    DECLINE = "decline"
    CANCEL = "cancel"


class Verdict(Enum):
    APPLY = "apply"
    # non-error: the invitation is returned exactly as stored
    UNCHANGED = "unchanged"
    REJECT = "reject"


@dataclass(frozen=True)
class InvitationFacts:
    status: InvitationStatus
    expires_at: datetime
    invited_user_id: str
    acting_user_id: str
    now: datetime
    actor_is_member: bool = False

    @classmethod
    def of(
        cls,
        invitation: CompanyEmployeeInvitation,
        *,
        acting_user_id: str,
        now: datetime,
        actor_is_member: bool = False,
    ) -> "InvitationFacts":
        return cls(
            status=InvitationStatus(invitation.status),
            expires_at=invitation.expires_at,
            invited_user_id=str(invitation.invited_user_id),
            acting_user_id=str(acting_user_id),
            now=now,
            actor_is_member=actor_is_member,
        )

    @property
    def time_expired(self) -> bool:
        return as_utc(self.expires_at) < as_utc(self.now)


@dataclass(frozen=True)
class Decision:
    verdict: Verdict
    message: str
    kind: Optional[ErrorKind] = None
    new_status: Optional[InvitationStatus] = None
    guard: Optional[str] = None


Predicate = Callable[[InvitationFacts], bool]
Guard = Tuple[str, Predicate, Decision]


def _status_is(status: InvitationStatus) -> Predicate:
    return lambda facts: facts.status is status


def _time_expired(facts: InvitationFacts) -> bool:
    return facts.time_expired


def _not_addressed_to_actor(facts: InvitationFacts) -> bool:
    return facts.invited_user_id != facts.acting_user_id


def _actor_is_member(facts: InvitationFacts) -> bool:
    return facts.actor_is_member


def _unchanged(message: str) -> Decision:
    return Decision(Verdict.UNCHANGED, message)


def _reject(message: str, kind: ErrorKind = ErrorKind.STATE) -> Decision:
    return Decision(Verdict.REJECT, message, kind=kind)


ACCEPT_GUARDS: List[Guard] = [
    ("already_accepted", _status_is(InvitationStatus.ACCEPTED), _unchanged(ALREADY_ACCEPTED)),
    ("time_expired", _time_expired, _reject(EXPIRED)),
    ("declined", _status_is(InvitationStatus.DECLINED), _reject(ALREADY_REJECTED)),
    ("cancelled", _status_is(InvitationStatus.CANCELLED), _reject(ALREADY_CANCELLED)),
    ("expired", _status_is(InvitationStatus.EXPIRED), _reject(EXPIRED)),
    ("not_addressed_to_actor", _not_addressed_to_actor, _reject(NOT_ADDRESSED_TO_ACTOR, ErrorKind.AUTHORIZATION)),
    ("already_employee", _actor_is_member, _reject(ALREADY_EMPLOYEE, ErrorKind.CONFLICT)),
]

DECLINE_GUARDS: List[Guard] = [
    ("time_expired", _time_expired, _reject(EXPIRED)),
    ("accepted", _status_is(InvitationStatus.ACCEPTED), _reject(ALREADY_ACCEPTED)),
    ("declined", _status_is(InvitationStatus.DECLINED), _reject(ALREADY_REJECTED)),
    ("cancelled", _status_is(InvitationStatus.CANCELLED), _reject(ALREADY_CANCELLED)),
    ("expired", _status_is(InvitationStatus.EXPIRED), _reject(EXPIRED)),
    ("not_addressed_to_actor", _not_addressed_to_actor, _reject(NOT_ADDRESSED_TO_ACTOR, ErrorKind.AUTHORIZATION)),
]

# Stored status wins over the clock when picking the message.
CANCEL_GUARDS: List[Guard] = [
    ("declined", _status_is(InvitationStatus.DECLINED), _unchanged(ALREADY_REJECTED)),
    ("cancelled", _status_is(InvitationStatus.CANCELLED), _unchanged(ALREADY_CANCELLED)),
    ("expired", _status_is(InvitationStatus.EXPIRED), _unchanged(EXPIRED)),
    ("time_expired", _time_expired, _unchanged(EXPIRED)),
    ("accepted", _status_is(InvitationStatus.ACCEPTED), _reject(ALREADY_ACCEPTED)),
]

TRANSITIONS: Dict[Transition, Tuple[List[Guard], Decision]] = {
    Transition.ACCEPT: (
        ACCEPT_GUARDS,
        Decision(Verdict.APPLY, "Invitation accepted successfully", new_status=InvitationStatus.ACCEPTED),
    ),
    Transition.DECLINE: (
        DECLINE_GUARDS,
        Decision(Verdict.APPLY, "Invitation declined successfully", new_status=InvitationStatus.DECLINED),
    ),
    Transition.CANCEL: (
        CANCEL_GUARDS,
        Decision(Verdict.APPLY, "Invitation cancelled successfully", new_status=InvitationStatus.CANCELLED),
    ),
}


def decide(transition: Transition, facts: InvitationFacts) -> Decision:
    guards, on_pass = TRANSITIONS[transition]
    for name, predicate, decision in guards:
        if predicate(facts):
            return Decision(
                verdict=decision.verdict,
                message=decision.message,
                kind=decision.kind,
                new_status=decision.new_status,
                guard=name,
            )
    return on_pass


def apply_decision(invitation: CompanyEmployeeInvitation, decision: Decision) -> bool:
    """Write the decided status onto the invitation. Returns True if it changed."""
    if decision.verdict is not Verdict.APPLY:
        return False
    invitation.status = decision.new_status.value
    return True


def open_invitation(
    *,
    sender_id: str,
    invited_user_id: str,
    role: Role,
    now: datetime,
) -> CompanyEmployeeInvitation:
    return CompanyEmployeeInvitation(
        sender_id=sender_id,
        invited_user_id=invited_user_id,
        role=role.value,
        status=InvitationStatus.PENDING.value,
        expires_at=as_utc(now) + INVITATION_TTL,
    )


def is_effectively_expired(invitation: CompanyEmployeeInvitation, now: datetime) -> bool:
    if invitation.status == InvitationStatus.EXPIRED.value:
        return True
    return invitation.status == InvitationStatus.PENDING.value and as_utc(invitation.expires_at) < as_utc(now)


def effective_status(invitation: CompanyEmployeeInvitation, now: datetime) -> InvitationStatus:
    if is_effectively_expired(invitation, now):
        return InvitationStatus.EXPIRED
    return InvitationStatus(invitation.status)


def blocks_new_invitation(invitation: CompanyEmployeeInvitation, now: datetime) -> bool:
    return effective_status(invitation, now) is InvitationStatus.PENDING
