# Overview: Operational error taxonomy shared by services and the HTTP boundary.

"""
Expected (operational) errors carry the HTTP status they map to.

Services raise these; the error handlers registered in create_app() render
them as {success: false, message, errors?}. Anything that is not an AppError
is unexpected: it is logged and surfaces as a generic 500.
"""

from __future__ import annotations


class AppError(Exception):
    """Base class for errors rendered as a structured response."""

    status_code = 500

    def __init__(self, message: str, *, errors: dict | None = None, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.errors = errors
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        body = {"success": False, "message": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationError(AppError, ValueError):
    """400-level input problem, optionally with a field -> message map."""

    status_code = 400

    def __init__(self, message: str = "Validation error", *, errors: dict | None = None):
        super().__init__(message, errors=errors)


class AuthenticationError(AppError):
    status_code = 401


class ForbiddenError(AppError):
    status_code = 403


class NotFoundError(AppError):
    """Referenced entity is absent or not owned by the caller."""

    status_code = 404


class ConflictError(AppError, ValueError):
    """409-level business rule conflict (e.g., duplicate distributor name)."""

    status_code = 409


class AlreadyInitializedError(ConflictError):
    """Opening stock was already recorded for this tenant."""


class InactiveError(AppError):
    """Operation against a deactivated distributor, staff member or customer."""

    status_code = 400


class InsufficientStockError(AppError):
    """
    A write would drive a full or empty cylinder count negative.

    available/requested describe the count that failed the check.
    """

    status_code = 400

    def __init__(
        self,
        message: str,
        *,
        cylinder_type_id: int | None = None,
        available: int | None = None,
        requested: int | None = None,
    ):
        super().__init__(message)
        self.cylinder_type_id = cylinder_type_id
        self.available = available
        self.requested = requested

    @property
    def shortfall(self) -> int | None:
        if self.available is None or self.requested is None:
            return None
        return max(self.requested - self.available, 0)
