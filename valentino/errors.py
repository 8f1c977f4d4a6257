"""Error taxonomy shared by the services and routers.

Service-level errors subclass ``HTTPException`` so FastAPI renders them as
``{"detail": ...}`` with the right status code. Collaborator errors are plain
exceptions; callers decide whether to swallow or translate them.
"""

from fastapi import HTTPException


class ServiceError(HTTPException):
    """Base class for errors raised at the service boundary"""

    status_code = 500
    default_detail = "Operation failed"

    def __init__(self, detail: str | None = None):
        super().__init__(status_code=self.status_code, detail=detail or self.default_detail)


class ValidationError(ServiceError):
    status_code = 400
    default_detail = "Invalid request"


class Unauthorized(ServiceError):
    status_code = 401
    default_detail = "Unauthorized: Invalid password"


class NotFound(ServiceError):
    status_code = 404
    default_detail = "Not found"


class Conflict(ServiceError):
    # Reported as a bad request with an explanatory message
    status_code = 400
    default_detail = "Conflicting request"


class StorageError(ServiceError):
    """Persistence failure. The message is generic; details stay in the server log."""

    status_code = 500


class PaymentProviderError(ServiceError):
    status_code = 502
    default_detail = "Failed to create checkout session"


class DeliveryError(Exception):
    """Raised by an email sender when a message could not be delivered"""

    pass


class SignatureError(Exception):
    """Raised when a payment webhook payload or signature fails verification"""

    pass
