"""
Exceptions raised by the Bobinas service.

Domain errors derive from InventoryError and are translated to HTTP responses
in main.py. UniqueViolation is the store-level signal that record stores raise
when the database rejects a duplicate key; InventoryService turns it into a
ConflictError.
"""
from typing import Dict, Optional

# Postgres SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


class InventoryError(Exception):
    """Base class for errors surfaced by the inventory core."""


class ValidationError(InventoryError):
    """
    A candidate record failed validation.

    Attributes:
        errors: Mapping of field name to a human-readable message
    """

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        fields = ", ".join(sorted(self.errors))
        super().__init__(f"Invalid bobina fields: {fields}")


class ConflictError(InventoryError):
    """A write was rejected because a unique field already holds the value."""

    def __init__(self, field: str, value: Optional[str] = None):
        self.field = field
        self.value = value
        if value is None:
            message = f"A record with this {field} already exists"
        else:
            message = f"A record with {field} '{value}' already exists"
        super().__init__(message)


class NotFoundError(InventoryError):
    """No record exists with the given id."""

    def __init__(self, bobina_id: str):
        self.bobina_id = bobina_id
        super().__init__(f"Bobina '{bobina_id}' not found")


class TransportError(InventoryError):
    """The record store could not be reached or answered unexpectedly."""


class UploadError(InventoryError):
    """
    A photo upload failed or was rejected.

    Attributes:
        rejected: True when the file itself was refused before any upload
    """

    def __init__(self, message: str, rejected: bool = False):
        self.rejected = rejected
        super().__init__(message)


class AuthError(InventoryError):
    """Sign-in, sign-up or token validation failed."""


class UniqueViolation(Exception):
    """Raised by a record store when a unique constraint rejects a write."""

    def __init__(self, constraint: Optional[str] = None, detail: str = ""):
        self.constraint = constraint
        self.detail = detail
        super().__init__(detail or f"Unique constraint violated: {constraint}")
