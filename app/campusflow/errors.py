from __future__ import annotations

from typing import Any


class ServiceError(RuntimeError):
    """Base for errors the API turns into a JSON ``{"error": ...}`` response."""

    status_code = 500

    def __init__(self, message: str, *, payload: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.payload = payload or {}

    def to_dict(self) -> dict[str, Any]:
        body = {"error": self.message}
        body.update(self.payload)
        return body


class ValidationError(ServiceError):
    status_code = 400

    @classmethod
    def from_errors(cls, errors: list[str]) -> "ValidationError":
        return cls(errors[0], payload={"errors": errors} if len(errors) > 1 else None)


class Unauthorized(ServiceError):
    status_code = 401


class Forbidden(ServiceError):
    status_code = 403


class NotFound(ServiceError):
    status_code = 404


class Conflict(ServiceError):
    status_code = 409


class UpstreamError(ServiceError):
    status_code = 502
