# Overview: Service error hierarchy shared by services, guards and routes.

from __future__ import annotations

from .units import kg_to_tonnes


class ServiceError(Exception):
    """Base for every error a route turns into a JSON response."""
    status_code = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        return {"error": self.message, **self.details}


class ValidationError(ServiceError):
    """400-level input problem; carries one message per failed field rule."""

    def __init__(self, errors: list[str]):
        super().__init__("; ".join(errors))
        self.errors = list(errors)

    def to_dict(self) -> dict:
        return {"errors": self.errors}


class Unauthenticated(ServiceError):
    status_code = 401


class Forbidden(ServiceError):
    status_code = 403


class NotFound(ServiceError):
    status_code = 404


class Conflict(ServiceError):
    """409-level business rule conflict (e.g., duplicate email)."""
    status_code = 409


class InvalidStatus(ServiceError):
    pass


class InsufficientStock(ServiceError):
    """Raised with kilogram amounts; the message and details report tonnes."""

    def __init__(self, available_kg: int, requested_kg: int):
        available = kg_to_tonnes(available_kg)
        requested = kg_to_tonnes(requested_kg)
        super().__init__(
            f"Insufficient stock. Available: {available:g} tonnes, Requested: {requested:g} tonnes",
            details={"available": available, "requested": requested},
        )
        self.available_kg = available_kg
        self.requested_kg = requested_kg


def error_response(exc: ServiceError):
    return exc.to_dict(), exc.status_code
