"""Errors raised by the service layer.

Each carries the HTTP status the API boundary answers with; the handler
in ``stockdesk.main`` turns them into ``{"detail": ...}`` responses.
"""


class ServiceError(Exception):
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class InvalidRequestError(ServiceError, ValueError):
    """Input is well-formed but breaks a business rule."""

    status_code = 400


class NotFoundError(ServiceError, LookupError):
    """A referenced product, order, warehouse, customer or user does not exist."""

    status_code = 404


class ConflictError(ServiceError):
    """Concurrent modification or an illegal state transition."""

    status_code = 409
