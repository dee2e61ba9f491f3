class ServiceError(Exception):
    """Base class for domain errors raised by the service layer.

    Each subclass carries the HTTP status the API boundary answers with, so
    services never import FastAPI.
    """

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    status_code = 404


class ForbiddenError(ServiceError):
    status_code = 403


class InvalidStateError(ServiceError):
    status_code = 409


class ValidationError(ServiceError):
    status_code = 400


class ConflictError(ServiceError):
    """A reading-progress write lost against a concurrent one."""

    status_code = 409
