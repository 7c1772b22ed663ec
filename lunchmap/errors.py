from __future__ import annotations

from typing import Any


class LunchMapError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, Any]:
        return {"message": self.message}


class ValidationError(LunchMapError):
    """Malformed or out-of-range input. ``fields`` names the offending inputs."""

    status_code = 400

    def __init__(self, message: str, fields: list[str] | None = None) -> None:
        super().__init__(message)
        self.fields = list(fields or [])

    def to_payload(self) -> dict[str, Any]:
        return {"message": self.message, "fields": self.fields}


class NotFound(LunchMapError):
    status_code = 404


class Forbidden(LunchMapError):
    status_code = 403


class Conflict(LunchMapError):
    status_code = 409


class StorageUnavailable(LunchMapError):
    """The backing JSON document could not be read, parsed or written."""

    status_code = 503
