from datetime import datetime, timezone
from typing import Any, Iterable, Optional, Union

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from membership.core.outcomes import FieldError, Outcome

ErrorsArg = Union[str, FieldError, dict, Iterable[Union[str, FieldError, dict]]]


def _normalize_errors(errors: Optional[ErrorsArg]) -> Optional[list]:
    if not errors:
        return None
    if isinstance(errors, (str, FieldError, dict)):
        errors = [errors]

    normalized = []
    for error in errors:
        if isinstance(error, str):
            normalized.append({"message": error})
        elif isinstance(error, FieldError):
            normalized.append(error.as_dict())
        else:
            normalized.append(dict(error))
    return normalized or None


def standard_response(
    *,
    is_success: bool,
    status_code: Optional[int] = None,
    message: Optional[str] = None,
    data: Any = None,
    errors: Optional[ErrorsArg] = None,
) -> dict:
    """Build the `{isSuccess, statusCode, message?, data?, errors?, timestamp}` envelope."""
    if status_code is None:
        status_code = 200 if is_success else 400

    body = {"isSuccess": is_success, "statusCode": int(status_code)}
    if message:
        body["message"] = message
    if data:
        body["data"] = jsonable_encoder(data)
    normalized = _normalize_errors(errors)
    if normalized:
        body["errors"] = normalized
    body["timestamp"] = datetime.now(timezone.utc).isoformat()
    return body


def envelope_response(
    status_code: int,
    *,
    message: Optional[str] = None,
    data: Any = None,
    errors: Optional[ErrorsArg] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        headers=headers,
        content=standard_response(
            is_success=status_code < 400,
            status_code=status_code,
            message=message,
            data=data,
            errors=errors,
        ),
    )


def respond(outcome: Outcome) -> JSONResponse:
    if outcome.is_success:
        return envelope_response(outcome.status_code, message=outcome.message, data=outcome.data)
    return envelope_response(outcome.status_code, message=outcome.message, errors=outcome.errors)
