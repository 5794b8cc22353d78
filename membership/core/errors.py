import logging
import uuid

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError

from membership.core.outcomes import ErrorKind, FieldError
from membership.core.responses import envelope_response

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Internal server error."


def ensure_request_id(request: Request) -> str:
    """
    Return a stable request id: one already on request.state, then the
    inbound X-Request-ID header, else a fresh one stored on request.state.
    """
    existing = getattr(request.state, "request_id", None)
    if existing:
        return str(existing)

    request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
    request.state.request_id = request_id
    return request_id


def _field_name(loc) -> str:
    # ("body", "availabilityTime", 0, "dayOfWeek") -> "availabilityTime[0].dayOfWeek"
    parts = [p for p in loc if p not in ("body", "query", "path", "header")]
    name = ""
    for part in parts:
        if isinstance(part, int):
            name += f"[{part}]"
        else:
            name += f".{part}" if name else str(part)
    return name or ".".join(str(p) for p in loc)


def _clean_message(message: str) -> str:
    # pydantic prefixes messages raised from validators with "Value error, ".
    prefix = "Value error, "
    if message.startswith(prefix):
        return message[len(prefix):]
    return message


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        request_id = ensure_request_id(request)
        message = exc.detail if isinstance(exc.detail, str) else "HTTP error"

        headers = dict(exc.headers or {})
        headers["X-Request-ID"] = request_id

        level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
        logger.log(
            level,
            "HTTPException %s %s -> %s",
            request.method,
            request.url.path,
            exc.status_code,
            extra={"request_id": request_id, "detail": exc.detail},
        )
        return envelope_response(exc.status_code, message=message, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        request_id = ensure_request_id(request)
        errors = [
            FieldError(message=_clean_message(str(err.get("msg", ""))), field=_field_name(err.get("loc", ())))
            for err in exc.errors()
        ]
        logger.warning(
            "Validation error %s %s -> 400",
            request.method,
            request.url.path,
            extra={"request_id": request_id, "errors": [e.as_dict() for e in errors]},
        )
        return envelope_response(
            400,
            message="Validation error",
            errors=errors,
            headers={"X-Request-ID": request_id},
        )

    @app.exception_handler(SQLAlchemyError)
    async def persistence_exception_handler(request: Request, exc: SQLAlchemyError):
        request_id = ensure_request_id(request)
        logger.exception(
            "Persistence failure %s %s -> %s",
            request.method,
            request.url.path,
            ErrorKind.INFRASTRUCTURE.status_code,
            extra={"request_id": request_id},
        )
        return envelope_response(
            ErrorKind.INFRASTRUCTURE.status_code,
            message=GENERIC_ERROR_MESSAGE,
            headers={"X-Request-ID": request_id},
        )
