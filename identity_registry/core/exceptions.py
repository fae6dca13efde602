"""
Application-level exceptions.

Every store failure is one of these kinds so callers can branch on the kind
(or on its stable ``code``) rather than on success/failure alone. A failed
operation never leaves a partial mutation behind.
"""

from __future__ import annotations


class RegistryError(Exception):
    """Base class for registry failures."""

    code = "registry_error"

    def __init__(self, message: str, **context: object) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, object]:
        out: dict[str, object] = {"error": self.code, "message": self.message}
        if self.context:
            out.update({k: v for k, v in self.context.items() if v is not None})
        return out


class Unauthorized(RegistryError):
    """Caller lacks the role required for the operation."""

    code = "unauthorized"


class AlreadyExists(RegistryError):
    """Create called on a subject with a live record."""

    code = "already_exists"


class NotFound(RegistryError):
    """Update/delete/read called on an absent record or profile."""

    code = "not_found"


class SubjectNotFound(NotFound):
    """Profile creation attempted against a subject with no identity record."""

    code = "subject_not_found"


class InvalidAddress(RegistryError, ValueError):
    """Address is empty or not a valid base58 public key."""

    code = "invalid_address"


class InvalidRecord(RegistryError, ValueError):
    """Record field has the wrong type or a negative unsigned value."""

    code = "invalid_record"


class ConfigError(RegistryError):
    """Missing or invalid configuration."""

    code = "config_error"
