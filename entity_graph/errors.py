"""Error taxonomy shared by entity stores and the link service."""

from typing import Any


class StoreError(Exception):
    """Base class for every error raised by stores, facades and the link service."""

    kind = "other"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        """Structured form handed to protocol adapters."""
        return {"error": self.kind, "details": self.message}


class NotFoundError(StoreError):
    """The operation targets an id that does not exist."""

    kind = "not_found"

    def __init__(self, entity_type: str, entity_id: str) -> None:
        super().__init__(f"{entity_type} not found: {entity_id}")
        self.entity_type = entity_type
        self.entity_id = entity_id


class ConflictError(StoreError):
    """A create was attempted with an id that is already present."""

    kind = "conflict"

    def __init__(self, entity_type: str, entity_id: str) -> None:
        super().__init__(f"{entity_type} already exists: {entity_id}")
        self.entity_type = entity_type
        self.entity_id = entity_id


class ValidationError(StoreError):
    """Input failed a declared rule."""

    kind = "validation"

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["field"] = self.field
        return payload


class BackendError(StoreError):
    """Wraps an unexpected failure of the underlying storage service."""

    kind = "other"
