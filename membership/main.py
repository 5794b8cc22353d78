from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request

from membership.core.errors import GENERIC_ERROR_MESSAGE, ensure_request_id, register_exception_handlers
from membership.core.logging import configure_logging
from membership.core.outcomes import ErrorKind
from membership.core.responses import envelope_response
from membership.models import company, company_employee, invitation, resource, user  # noqa: F401
from membership.routers.auth import router as auth_router
from membership.routers.companies import router as companies_router
from membership.routers.invitations import router as invitations_router
from membership.routers.resources import router as resources_router

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    yield


app = FastAPI(
    title="Company Membership Service",
    version=VERSION,
    lifespan=lifespan,
)

register_exception_handlers(app)


@app.middleware("http")
async def catch_unhandled_exceptions(request: Request, call_next):
    request_id = ensure_request_id(request)
    try:
        response = await call_next(request)
    except Exception:
        logger.exception(
            "Unhandled exception %s %s",
            request.method,
            request.url.path,
            extra={"request_id": request_id},
        )
        return envelope_response(
            ErrorKind.INFRASTRUCTURE.status_code,
            message=GENERIC_ERROR_MESSAGE,
            headers={"X-Request-ID": request_id},
        )
    response.headers.setdefault("X-Request-ID", request_id)
    return response


app.include_router(auth_router)
app.include_router(companies_router)
app.include_router(invitations_router)
app.include_router(resources_router)


@app.get("/health")
def health():
    return {
        "status": "ok",
        "version": VERSION,
    }
