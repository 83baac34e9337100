"""Domain errors raised by services and mapped to HTTP responses in `inkwell.main`"""

from typing import Dict, List, Optional


class FieldErrors(dict):
    """Accumulates validation messages per field."""

    def add(self, field: str, message: str) -> None:
        self.setdefault(field, []).append(message)

    def merge(self, other: Dict[str, List[str]]) -> None:
        for field, messages in other.items():
            for message in messages:
                self.add(field, message)

    def full_messages(self) -> List[str]:
        return [f"{field.replace('_', ' ').capitalize()} {message}" for field, messages in self.items() for message in messages]


class RecordInvalid(Exception):
    """Save rejected; nothing was written."""

    def __init__(self, errors: Dict[str, List[str]], message: Optional[str] = None):
        self.errors = FieldErrors()
        self.errors.merge(errors)
        super().__init__(message or "; ".join(self.errors.full_messages()) or "Validation failed")


class RecordNotFound(LookupError):
    """Lookup by identifier found no row."""

    def __init__(self, model: str, identifier):
        self.model = model
        self.identifier = identifier
        super().__init__(f"{model} {identifier!r} not found")


class PermissionDenied(Exception):
    """Acting user is neither the owner of the resource nor an admin."""
