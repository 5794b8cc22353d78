from datetime import timedelta

from fastapi.testclient import TestClient

from membership.database import SessionLocal
from membership.main import app
from membership.models.company_employee import CompanyEmployee
from membership.models.invitation import CompanyEmployeeInvitation
from membership.models.user import User

client = TestClient(app)


def _make_user(name: str = "user") -> str:
    db = SessionLocal()
    try:
        row = User(display_name=name)
        db.add(row)
        db.commit()
        return row.id
    finally:
        db.close()


def _auth_headers(user_id: str) -> dict:
    resp = client.post("/auth/token", json={"user_id": user_id})
    assert resp.status_code == 200, f"token request failed: {resp.status_code} {resp.text}"
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


def _create_company(owner_id: str) -> str:
    r = client.post(
        "/v1/companies",
        headers=_auth_headers(owner_id),
        json={"name": "Salon", "country": "RO", "city": "Brasov", "street": "Republicii 5"},
    )
    assert r.status_code == 201, r.text
    return r.json()["data"]["company"]["id"]


def _invite(company_id: str, owner_id: str, invitee_id: str, role: str = "regular"):
    return client.post(
        f"/v1/companies/{company_id}/invitations",
        headers=_auth_headers(owner_id),
        json={"invitedUserId": invitee_id, "role": role},
    )


def _patch(company_id: str, invitation_id: str, action: str, user_id: str):
    return client.patch(
        f"/v1/companies/{company_id}/invitations/{invitation_id}/{action}",
        headers=_auth_headers(user_id),
    )


def _expire(invitation_id: str) -> None:
    db = SessionLocal()
    try:
        row = db.query(CompanyEmployeeInvitation).filter(CompanyEmployeeInvitation.id == invitation_id).first()
        row.expires_at = row.expires_at - timedelta(weeks=2)
        db.commit()
    finally:
        db.close()


def test_invite_then_accept_flow():
    owner = _make_user("owner")
    invitee = _make_user("invitee")
    company_id = _create_company(owner)

    r = _invite(company_id, owner, invitee, role="Manager")
    assert r.status_code == 201
    body = r.json()
    assert body["message"] == "Invitation sent"
    invitation = body["data"]["invitation"]
    assert invitation["role"] == "MANAGER"
    assert invitation["status"] == "PENDING"
    assert invitation["expiresIn"] == "604800000"

    r = _patch(company_id, invitation["id"], "accept", invitee)
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["invitation"]["status"] == "ACCEPTED"
    assert data["employee"]["companyId"] == company_id
    assert data["employee"]["role"] == "MANAGER"

    r = _patch(company_id, invitation["id"], "accept", invitee)
    assert r.status_code == 200
    assert r.json()["message"] == "This invitation has already been accepted"
    assert r.json()["data"]["existingInvitation"]["id"] == invitation["id"]

    r = _patch(company_id, invitation["id"], "decline", invitee)
    assert r.status_code == 400
    assert r.json()["message"] == "This invitation has already been accepted"


def test_invite_validation_errors():
    owner = _make_user("owner")
    invitee = _make_user("invitee")
    company_id = _create_company(owner)

    r = _invite(company_id, owner, invitee, role="king")
    assert r.status_code == 400
    assert r.json()["errors"][0]["field"] == "role"
    assert "Invalid role" in r.json()["errors"][0]["message"]

    r = client.post(
        f"/v1/companies/{company_id}/invitations",
        headers=_auth_headers(owner),
        json={"role": "REGULAR"},
    )
    assert r.status_code == 400

    r = _invite(company_id, owner, owner)
    assert r.status_code == 400
    assert r.json()["message"] == "Validation error"
    assert r.json()["errors"] == [{"message": "You cannot invite yourself to a company", "field": "invitedUserId"}]


def test_invite_status_codes():
    owner = _make_user("owner")
    invitee = _make_user("invitee")
    regular = _make_user("regular")
    company_id = _create_company(owner)

    db = SessionLocal()
    try:
        db.add(CompanyEmployee(company_id=company_id, employee_id=regular, role="REGULAR"))
        db.commit()
    finally:
        db.close()

    assert _invite("missing-company", owner, invitee).status_code == 404
    assert _invite(company_id, owner, "missing-user").status_code == 404
    assert _invite(company_id, regular, invitee).status_code == 403
    assert _invite(company_id, owner, regular).status_code == 400

    assert _invite(company_id, owner, invitee).status_code == 201
    duplicate = _invite(company_id, owner, invitee)
    assert duplicate.status_code == 400
    assert duplicate.json()["message"] == "This user already has a pending invitation"


def test_decline_flow_and_wrong_user():
    owner = _make_user("owner")
    invitee = _make_user("invitee")
    stranger = _make_user("stranger")
    company_id = _create_company(owner)
    invitation_id = _invite(company_id, owner, invitee).json()["data"]["invitation"]["id"]

    r = _patch(company_id, invitation_id, "decline", stranger)
    assert r.status_code == 403
    assert r.json()["message"] == "No invitation found for this user"

    r = _patch(company_id, invitation_id, "decline", invitee)
    assert r.status_code == 200
    assert r.json()["data"]["invitation"]["status"] == "DECLINED"

    r = _patch(company_id, invitation_id, "decline", invitee)
    assert r.status_code == 400
    assert r.json()["message"] == "This invitation has already been rejected"

    r = _patch(company_id, invitation_id, "cancel", owner)
    assert r.status_code == 200
    assert r.json()["message"] == "This invitation has already been rejected"
    assert r.json()["data"]["existingInvitation"]["status"] == "DECLINED"


def test_cancel_flow():
    owner = _make_user("owner")
    invitee = _make_user("invitee")
    company_id = _create_company(owner)
    invitation_id = _invite(company_id, owner, invitee).json()["data"]["invitation"]["id"]

    r = _patch(company_id, invitation_id, "cancel", invitee)
    assert r.status_code == 403
    assert r.json()["message"] == "You must be an owner of the company"

    r = _patch(company_id, invitation_id, "cancel", owner)
    assert r.status_code == 200
    assert r.json()["message"] == "Invitation cancelled successfully"
    assert r.json()["data"]["invitation"]["status"] == "CANCELLED"

    r = _patch(company_id, invitation_id, "cancel", owner)
    assert r.status_code == 200
    assert r.json()["message"] == "This invitation has already been cancelled"

    r = _patch(company_id, invitation_id, "accept", invitee)
    assert r.status_code == 400
    assert r.json()["message"] == "This invitation has already been cancelled"


def test_expired_invitation():
    owner = _make_user("owner")
    invitee = _make_user("invitee")
    company_id = _create_company(owner)
    invitation_id = _invite(company_id, owner, invitee).json()["data"]["invitation"]["id"]
    _expire(invitation_id)

    for action in ("accept", "decline"):
        r = _patch(company_id, invitation_id, action, invitee)
        assert r.status_code == 400
        assert r.json()["message"] == "This invitation has expired"

    r = _patch(company_id, invitation_id, "cancel", owner)
    assert r.status_code == 200
    assert r.json()["data"]["existingInvitation"]["status"] == "PENDING"

    assert _invite(company_id, owner, invitee).status_code == 201


def test_unknown_invitation_404():
    owner = _make_user("owner")
    company_id = _create_company(owner)

    r = _patch(company_id, "nope", "accept", owner)
    assert r.status_code == 404
    assert r.json()["message"] == "Invitation not found"
