from typing import Optional


class PersonnelError(Exception):
    """Base class for errors the API turns into structured responses."""


class ValidationError(PersonnelError):
    """Rejected input: missing field, duplicate identifier, overlapping dates."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class ConflictError(ValidationError):
    """The write collided with existing rows (unique key or open-ended record)."""


class NotFoundError(PersonnelError):
    def __init__(self, entity: str):
        super().__init__(f"{entity} not found")
        self.entity = entity


class PersistenceError(PersonnelError):
    """A multi-step write failed and was rolled back."""
