"""Error hierarchy for datareg.

Error layers:
- RegistryError: Base class for all datareg errors
- DomainError: Business rule violations, validation failures (4xx responses)
- InfrastructureError: System-level failures like storage/network issues (503 responses)

These errors are mapped to HTTP responses by the global exception handler in app.py.
"""


class RegistryError(Exception):
    """Base class for all datareg errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


# =============================================================================
# Domain Errors (business logic violations - typically 4xx)
# =============================================================================


class DomainError(RegistryError):
    """Base class for domain/business errors."""


class NotFoundError(DomainError):
    """Resource not found."""


class ValidationError(DomainError):
    """Input validation failed (an empty required field, a bad page bound)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field


class ConflictError(DomainError):
    """Resource already exists or a concurrent write won."""


class DuplicateReferenceError(ConflictError):
    """A dataset with this content identifier is already registered."""

    def __init__(self, dataset_ref: str) -> None:
        super().__init__(
            f"Dataset reference already registered: {dataset_ref}",
            code="DUPLICATE_REFERENCE",
        )
        self.dataset_ref = dataset_ref


class AuthorizationError(DomainError):
    """Caller not authorized for this operation."""


class NotOwnerError(AuthorizationError):
    """Mutation attempted by an actor that does not own the dataset."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="NOT_OWNER")


class AccessDeniedError(AuthorizationError):
    """Read of a private dataset by an actor that does not own it."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="ACCESS_DENIED")


# =============================================================================
# Infrastructure Errors (system-level failures - typically 503)
# =============================================================================


class InfrastructureError(RegistryError):
    """Base class for infrastructure/system errors."""


class StorageUnavailableError(InfrastructureError):
    """Storage backend (database) is unavailable."""


class ExternalServiceError(InfrastructureError):
    """External service (notification webhook) is unavailable or failed."""


class ConfigurationError(InfrastructureError):
    """System misconfiguration detected."""
