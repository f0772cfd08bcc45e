from __future__ import annotations

from fastapi import HTTPException


class OrderingError(Exception):
    """Base for every failure the services report to their callers.

    ``kind`` is a stable tag clients can switch on; ``message`` is meant for
    humans and is returned verbatim.
    """

    kind = "error"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(OrderingError):
    kind = "validation_error"
    status_code = 400


class InvalidTransitionError(ValidationError):
    kind = "invalid_transition"
    status_code = 409


class NotFoundError(OrderingError):
    kind = "not_found"
    status_code = 404


class ConflictError(OrderingError):
    kind = "conflict"
    status_code = 409


class PersistenceError(OrderingError):
    kind = "persistence_error"
    status_code = 500


def to_http_exception(exc: OrderingError) -> HTTPException:
    return HTTPException(
        status_code=exc.status_code,
        detail={"kind": exc.kind, "message": exc.message},
    )
