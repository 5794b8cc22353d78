from datetime import datetime, timedelta, timezone

from membership.core.authorization import Role
from membership.core.outcomes import ErrorKind
from membership.database import SessionLocal
from membership.models.company import Company
from membership.models.company_employee import CompanyEmployee
from membership.models.invitation import CompanyEmployeeInvitation
from membership.models.user import User
from membership.services import invitation_service


def _db():
    return SessionLocal()


def _make_user(name: str) -> str:
    db = _db()
    try:
        row = User(display_name=name)
        db.add(row)
        db.commit()
        return row.id
    finally:
        db.close()


def _make_company(owner_id: str) -> str:
    db = _db()
    try:
        company = Company(name="Acme", country="RO", city="Cluj", street="Main 1", created_by_id=owner_id)
        db.add(company)
        db.flush()
        db.add(CompanyEmployee(company_id=company.id, employee_id=owner_id, role="OWNER"))
        db.commit()
        return company.id
    finally:
        db.close()


def _add_member(company_id: str, user_id: str, role: str) -> str:
    db = _db()
    try:
        row = CompanyEmployee(company_id=company_id, employee_id=user_id, role=role)
        db.add(row)
        db.commit()
        return row.id
    finally:
        db.close()


def _get_invitation(invitation_id: str) -> CompanyEmployeeInvitation:
    db = _db()
    try:
        row = db.query(CompanyEmployeeInvitation).filter(CompanyEmployeeInvitation.id == invitation_id).first()
        assert row is not None
        return row
    finally:
        db.close()


def _membership(company_id: str, user_id: str):
    db = _db()
    try:
        return (
            db.query(CompanyEmployee)
            .filter(CompanyEmployee.company_id == company_id, CompanyEmployee.employee_id == user_id)
            .first()
        )
    finally:
        db.close()


def _setup():
    owner = _make_user("Owner")
    invitee = _make_user("Invitee")
    company_id = _make_company(owner)
    return owner, invitee, company_id


def _invite(company_id, owner, invitee, role=Role.REGULAR, now=None):
    outcome = invitation_service.invite_employee(
        company_id=company_id,
        sender_user_id=owner,
        invited_user_id=invitee,
        role=role,
        now=now,
    )
    assert outcome.is_success, outcome
    return outcome.data["invitation"]["id"]


def test_invite_creates_pending_invitation_with_ttl():
    owner, invitee, company_id = _setup()
    now = datetime(2026, 5, 1, 8, 0, tzinfo=timezone.utc)

    outcome = invitation_service.invite_employee(
        company_id=company_id,
        sender_user_id=owner,
        invited_user_id=invitee,
        role=Role.MANAGER,
        now=now,
    )

    assert outcome.is_success
    assert outcome.status_code == 201
    body = outcome.data["invitation"]
    assert body["status"] == "PENDING"
    assert body["role"] == "MANAGER"
    assert body["invitedUserId"] == invitee
    assert body["expiresIn"] == "604800000"
    assert body["expiresAt"].startswith("2026-05-08T08:00:00")


def test_invite_rejects_duplicate_pending_until_it_leaves_pending():
    owner, invitee, company_id = _setup()
    first_id = _invite(company_id, owner, invitee)

    duplicate = invitation_service.invite_employee(
        company_id=company_id, sender_user_id=owner, invited_user_id=invitee, role=Role.REGULAR
    )
    assert not duplicate.is_success
    assert duplicate.kind is ErrorKind.CONFLICT
    assert duplicate.status_code == 400

    declined = invitation_service.decline_invitation(
        company_id=company_id, invitation_id=first_id, acting_user_id=invitee
    )
    assert declined.is_success

    second_id = _invite(company_id, owner, invitee)
    assert second_id != first_id


def test_invite_allowed_again_once_pending_invitation_expired_by_time():
    owner, invitee, company_id = _setup()
    long_ago = datetime.now(timezone.utc) - timedelta(days=30)
    _invite(company_id, owner, invitee, now=long_ago)

    _invite(company_id, owner, invitee)


def test_invite_preconditions():
    owner, invitee, company_id = _setup()
    regular = _make_user("Regular")
    _add_member(company_id, regular, "REGULAR")

    r = invitation_service.invite_employee(
        company_id="missing", sender_user_id=owner, invited_user_id=invitee, role=Role.REGULAR
    )
    assert r.kind is ErrorKind.NOT_FOUND

    r = invitation_service.invite_employee(
        company_id=company_id, sender_user_id=invitee, invited_user_id=owner, role=Role.REGULAR
    )
    assert r.kind is ErrorKind.NOT_FOUND

    r = invitation_service.invite_employee(
        company_id=company_id, sender_user_id=regular, invited_user_id=invitee, role=Role.REGULAR
    )
    assert r.kind is ErrorKind.AUTHORIZATION

    r = invitation_service.invite_employee(
        company_id=company_id, sender_user_id=owner, invited_user_id=owner, role=Role.REGULAR
    )
    assert r.kind is ErrorKind.VALIDATION
    assert r.errors[0].field == "invitedUserId"

    r = invitation_service.invite_employee(
        company_id=company_id, sender_user_id=owner, invited_user_id="no-such-user", role=Role.REGULAR
    )
    assert r.kind is ErrorKind.NOT_FOUND

    r = invitation_service.invite_employee(
        company_id=company_id, sender_user_id=owner, invited_user_id=regular, role=Role.REGULAR
    )
    assert r.kind is ErrorKind.CONFLICT


def test_accept_creates_membership_and_second_accept_is_non_error():
    owner, invitee, company_id = _setup()
    invitation_id = _invite(company_id, owner, invitee, role=Role.MANAGER)

    first = invitation_service.accept_invitation(
        company_id=company_id, invitation_id=invitation_id, acting_user_id=invitee
    )
    assert first.is_success
    assert first.data["invitation"]["status"] == "ACCEPTED"
    assert first.data["employee"]["role"] == "MANAGER"
    assert first.data["employee"]["employeeId"] == invitee

    member = _membership(company_id, invitee)
    assert member is not None
    assert member.role == "MANAGER"

    second = invitation_service.accept_invitation(
        company_id=company_id, invitation_id=invitation_id, acting_user_id=invitee
    )
    assert second.is_success
    assert second.message == "This invitation has already been accepted"
    assert second.data["existingInvitation"]["status"] == "ACCEPTED"


def test_decline_and_cancel_after_accept_fail():
    owner, invitee, company_id = _setup()
    invitation_id = _invite(company_id, owner, invitee)
    invitation_service.accept_invitation(company_id=company_id, invitation_id=invitation_id, acting_user_id=invitee)

    declined = invitation_service.decline_invitation(
        company_id=company_id, invitation_id=invitation_id, acting_user_id=invitee
    )
    assert not declined.is_success
    assert declined.message == "This invitation has already been accepted"

    cancelled = invitation_service.cancel_invitation(
        company_id=company_id, invitation_id=invitation_id, acting_user_id=owner
    )
    assert not cancelled.is_success
    assert cancelled.message == "This invitation has already been accepted"
    assert _get_invitation(invitation_id).status == "ACCEPTED"


def test_cancel_is_idempotent_while_accept_and_decline_fail():
    owner, invitee, company_id = _setup()
    invitation_id = _invite(company_id, owner, invitee)

    first = invitation_service.cancel_invitation(
        company_id=company_id, invitation_id=invitation_id, acting_user_id=owner
    )
    assert first.is_success
    assert first.data["invitation"]["status"] == "CANCELLED"
    before = _get_invitation(invitation_id)

    again = invitation_service.cancel_invitation(
        company_id=company_id, invitation_id=invitation_id, acting_user_id=owner
    )
    assert again.is_success
    assert again.message == "This invitation has already been cancelled"
    assert again.data["existingInvitation"]["status"] == "CANCELLED"
    assert _get_invitation(invitation_id).updated_at == before.updated_at

    accepted = invitation_service.accept_invitation(
        company_id=company_id, invitation_id=invitation_id, acting_user_id=invitee
    )
    assert not accepted.is_success
    assert accepted.kind is ErrorKind.STATE

    declined = invitation_service.decline_invitation(
        company_id=company_id, invitation_id=invitation_id, acting_user_id=invitee
    )
    assert not declined.is_success
    assert declined.message == "This invitation has already been cancelled"


def test_time_expired_invitation_is_effectively_expired():
    owner, invitee, company_id = _setup()
    invitation_id = _invite(company_id, owner, invitee)
    later = datetime.now(timezone.utc) + timedelta(weeks=1, minutes=1)

    accepted = invitation_service.accept_invitation(
        company_id=company_id, invitation_id=invitation_id, acting_user_id=invitee, now=later
    )
    assert accepted.message == "This invitation has expired"
    assert accepted.status_code == 400

    cancelled = invitation_service.cancel_invitation(
        company_id=company_id, invitation_id=invitation_id, acting_user_id=owner, now=later
    )
    assert cancelled.is_success
    assert cancelled.message == "This invitation has expired"
    assert _get_invitation(invitation_id).status == "PENDING"
    assert _membership(company_id, invitee) is None


def test_only_the_invited_user_may_accept_or_decline():
    owner, invitee, company_id = _setup()
    stranger = _make_user("Stranger")
    invitation_id = _invite(company_id, owner, invitee)

    for op in (invitation_service.accept_invitation, invitation_service.decline_invitation):
        outcome = op(company_id=company_id, invitation_id=invitation_id, acting_user_id=stranger)
        assert outcome.kind is ErrorKind.AUTHORIZATION
        assert outcome.status_code == 403

    assert _get_invitation(invitation_id).status == "PENDING"


def test_cancel_requires_owner():
    owner, invitee, company_id = _setup()
    manager = _make_user("Manager")
    _add_member(company_id, manager, "MANAGER")
    invitation_id = _invite(company_id, owner, invitee)

    outcome = invitation_service.cancel_invitation(
        company_id=company_id, invitation_id=invitation_id, acting_user_id=manager
    )
    assert outcome.kind is ErrorKind.AUTHORIZATION
    assert _get_invitation(invitation_id).status == "PENDING"


def test_accept_when_already_member_of_company():
    owner, invitee, company_id = _setup()
    invitation_id = _invite(company_id, owner, invitee)
    _add_member(company_id, invitee, "REGULAR")

    outcome = invitation_service.accept_invitation(
        company_id=company_id, invitation_id=invitation_id, acting_user_id=invitee
    )
    assert outcome.kind is ErrorKind.CONFLICT
    assert outcome.message == "User is already an employee of this company"
    assert _get_invitation(invitation_id).status == "PENDING"


def test_invitation_is_scoped_to_its_company():
    owner, invitee, company_id = _setup()
    other_company_id = _make_company(owner)
    invitation_id = _invite(company_id, owner, invitee)

    outcome = invitation_service.accept_invitation(
        company_id=other_company_id, invitation_id=invitation_id, acting_user_id=invitee
    )
    assert outcome.kind is ErrorKind.NOT_FOUND
    assert outcome.message == "Invitation not found"


def test_invite_allowed_again_after_cancel():
    owner, invitee, company_id = _setup()
    first_id = _invite(company_id, owner, invitee)

    cancelled = invitation_service.cancel_invitation(
        company_id=company_id, invitation_id=first_id, acting_user_id=owner
    )
    assert cancelled.is_success
    assert _get_invitation(first_id).status == "CANCELLED"

    second_id = _invite(company_id, owner, invitee)
    assert second_id != first_id
    assert _get_invitation(second_id).status == "PENDING"


def test_accept_losing_membership_race_reports_conflict(monkeypatch):
    from membership.services.repositories import CompanyEmployeeRepository

    owner, invitee, company_id = _setup()
    invitation_id = _invite(company_id, owner, invitee)
    # Another request made the invitee a member after the membership check ran.
    _add_member(company_id, invitee, "REGULAR")
    monkeypatch.setattr(CompanyEmployeeRepository, "get_membership", lambda self, company_id, user_id: None)

    outcome = invitation_service.accept_invitation(
        company_id=company_id, invitation_id=invitation_id, acting_user_id=invitee
    )

    assert outcome.kind is ErrorKind.CONFLICT
    assert outcome.message == "User is already an employee of this company"
    assert _get_invitation(invitation_id).status == "PENDING"
