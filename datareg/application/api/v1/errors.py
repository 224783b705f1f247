"""Centralized error transformation for API routes.

Maps datareg errors (domain and infrastructure) to HTTPException responses.
"""

from typing import Any

from fastapi import HTTPException

from datareg.domain.shared.error import (
    AuthorizationError,
    ConflictError,
    DomainError,
    InfrastructureError,
    NotFoundError,
    RegistryError,
    ValidationError,
)

DOMAIN_ERROR_STATUS_MAP: dict[type[DomainError], int] = {
    NotFoundError: 404,
    ValidationError: 422,
    ConflictError: 409,
    AuthorizationError: 403,
}


def _domain_status(error: DomainError) -> int:
    # Subclasses (DuplicateReferenceError, NotOwnerError, ...) inherit their base's status
    for cls in type(error).__mro__:
        if cls in DOMAIN_ERROR_STATUS_MAP:
            return DOMAIN_ERROR_STATUS_MAP[cls]
    return 400


def map_registry_error(error: RegistryError) -> HTTPException:
    """Map a datareg error to an HTTPException."""
    detail: dict[str, Any] = {
        "code": error.code,
        "message": error.message,
    }

    if isinstance(error, InfrastructureError):
        return HTTPException(status_code=503, detail=detail)

    if isinstance(error, DomainError):
        if isinstance(error, ValidationError) and error.field is not None:
            detail["field"] = error.field
        # Distinguish 401 (no actor at all) from 403 (wrong actor)
        if isinstance(error, AuthorizationError) and error.code == "missing_actor":
            return HTTPException(status_code=401, detail=detail)
        return HTTPException(status_code=_domain_status(error), detail=detail)

    return HTTPException(status_code=500, detail=detail)
