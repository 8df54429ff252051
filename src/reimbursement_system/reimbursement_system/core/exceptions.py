from __future__ import annotations

from typing import Mapping, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules.

    ``fields`` maps each offending field to a short description of the problem.
    """

    def __init__(self, message: str, fields: Optional[Mapping[str, str]] = None):
        super().__init__(message)
        self.fields = dict(fields or {})

    @classmethod
    def from_fields(cls, fields: Mapping[str, str]) -> "ValidationError":
        summary = "; ".join(f"{name}: {problem}" for name, problem in fields.items())
        return cls(f"invalid input ({summary})", fields)


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class InvalidTransitionError(DomainError):
    """Raised when a bill status change is not allowed from its current status."""

    def __init__(self, action: str, current_status):
        self.action = action
        self.current_status = current_status
        status = getattr(current_status, "value", current_status)
        super().__init__(f"cannot {action.replace('_', ' ')}: bill status is '{status}'")


class ConflictError(DomainError):
    """Raised when a user account is already linked to another employee."""


class NotFoundError(DomainError):
    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")
