from fastapi import HTTPException, Request

from membership.database import SessionLocal
from membership.services.auth_service import verify_token
from membership.services.repositories import UserRepository


def _parse_bearer_token(request: Request) -> str:
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise HTTPException(status_code=401, detail="Missing Authorization header")

    parts = auth_header.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
        raise HTTPException(status_code=401, detail="Invalid Authorization header")

    return parts[1].strip()


def require_auth(request: Request) -> str:
    """Resolve the bearer token to a live (not soft-deleted) user id."""
    token = _parse_bearer_token(request)

    try:
        claims = verify_token(token)
    except ValueError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc

    user_id = str(claims["sub"])

    db = SessionLocal()
    try:
        user = UserRepository(db).get(user_id)
    finally:
        db.close()

    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")

    request.state.user_id = user_id
    return user_id
