from __future__ import annotations

from fastapi import HTTPException

from vendeai.domain.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    PaymentError,
    UpstreamProviderError,
    UserInactiveError,
    ValidationError,
)


_STATUS_BY_ERROR: tuple[tuple[type[DomainError], int], ...] = (
    (UserInactiveError, 403),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (ValidationError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
    (PaymentError, 402),
    (UpstreamProviderError, 502),
)


def to_http_exception(exc: DomainError) -> HTTPException:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
            return HTTPException(status_code=status_code, detail=str(exc), headers=headers)
    return HTTPException(status_code=400, detail=str(exc))
