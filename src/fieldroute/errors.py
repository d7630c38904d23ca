"""Typed failures raised by the scheduling and routing services."""

from __future__ import annotations


class FieldRouteError(Exception):
    """Base class for errors surfaced to the HTTP layer."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(FieldRouteError):
    """A company, employee, store, route or waypoint does not exist."""

    status_code = 404


class InvalidInputError(FieldRouteError, ValueError):
    status_code = 400


class ConflictError(FieldRouteError):
    """A concurrent write won the race and retries were exhausted."""

    status_code = 409


class ForbiddenError(FieldRouteError):
    status_code = 403
