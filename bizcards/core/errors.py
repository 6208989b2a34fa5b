"""
Result shape shared by every server-side mutation.

Operations return ``ActionResult`` rather than raising, so routers can
render failures inline; only unexpected exceptions reach the global handler,
which converts them to the same shape.
"""
from typing import Any, Dict, Generic, List, Optional, TypeVar

from fastapi import status
from pydantic import BaseModel

T = TypeVar("T")


class ErrorKind:
    validation = "validation"
    unauthorized = "unauthorized"
    not_found = "not_found"
    upstream = "upstream"
    rate_limited = "rate_limited"
    conflict = "conflict"


STATUS_BY_KIND = {
    ErrorKind.validation: status.HTTP_400_BAD_REQUEST,
    ErrorKind.unauthorized: status.HTTP_403_FORBIDDEN,
    ErrorKind.not_found: status.HTTP_404_NOT_FOUND,
    ErrorKind.upstream: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.rate_limited: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorKind.conflict: status.HTTP_409_CONFLICT,
}

UNAUTHORIZED_COMPANY = "Unauthorized: You don't have access to this company"
UNAUTHORIZED_EMPLOYEE = "Unauthorized: You don't have access to this employee"


class FieldError(BaseModel):
    field: str
    code: str
    message: str


class ActionResult(BaseModel, Generic[T]):
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    # Message code, lets the HTTP boundary translate `error`
    code: Optional[str] = None
    # kind and params are not serialized; kind drives the HTTP status
    kind: Optional[str] = None
    params: Optional[Dict[str, Any]] = None
    field_errors: Optional[List[FieldError]] = None

    @classmethod
    def ok(cls, data: Any = None) -> "ActionResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(
        cls,
        error: str,
        kind: str = ErrorKind.validation,
        field_errors: Optional[List[FieldError]] = None,
        code: Optional[str] = None,
        **params: Any
    ) -> "ActionResult":
        return cls(
            success=False,
            error=error,
            kind=kind,
            field_errors=field_errors,
            code=code,
            params=params or None,
        )

    @property
    def status_code(self) -> int:
        if self.success:
            return status.HTTP_200_OK
        return STATUS_BY_KIND.get(self.kind, status.HTTP_400_BAD_REQUEST)

    def to_body(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude={"kind", "params"}, exclude_none=True)


class StorageError(Exception):
    """Object storage failure, message is safe to show to company admins."""


class BucketNotFoundError(StorageError):
    def __init__(self, bucket: str):
        self.bucket = bucket
        super().__init__(
            f'Storage bucket "{bucket}" not found. Please create it in the storage settings.'
        )


class PhotoValidationError(ValueError):
    """Uploaded photo rejected; ``code`` is a message code."""

    def __init__(self, code: str, message: str):
        self.code = code
        super().__init__(message)
