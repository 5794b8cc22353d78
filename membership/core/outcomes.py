"""Tagged results returned by use cases.

Expected domain failures are values, not exceptions, so that guard ordering
stays deterministic and testable. Only infrastructure failures raise.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Union


class ErrorKind(Enum):
    VALIDATION = "validation"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    # Duplicate pending invitation / duplicate membership. Reported as 400,
    # not 409, for invitations.
    CONFLICT = "conflict"
    STATE = "state"
    INFRASTRUCTURE = "infrastructure"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]


_STATUS_CODES = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.AUTHORIZATION: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 400,
    ErrorKind.STATE: 400,
    ErrorKind.INFRASTRUCTURE: 500,
}


@dataclass(frozen=True)
class FieldError:
    message: str
    field: Optional[str] = None

    def as_dict(self) -> dict:
        body = {"message": self.message}
        if self.field is not None:
            body["field"] = self.field
        return body


@dataclass(frozen=True)
class Success:
    data: Any = None
    message: Optional[str] = None
    status_code: int = 200

    @property
    def is_success(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    kind: ErrorKind
    message: str
    errors: List[FieldError] = field(default_factory=list)

    @property
    def is_success(self) -> bool:
        return False

    @property
    def status_code(self) -> int:
        return self.kind.status_code


Outcome = Union[Success, Failure]


def validation_failure(message: str, field_name: Optional[str] = None) -> Failure:
    return Failure(
        kind=ErrorKind.VALIDATION,
        message="Validation error",
        errors=[FieldError(message=message, field=field_name)],
    )
