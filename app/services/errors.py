from __future__ import annotations

from collections.abc import Sequence


class UserStoreError(Exception):
    """Base class for failures raised by the user store."""


class ValidationError(UserStoreError):
    """Required user fields are missing, empty or of the wrong type."""

    def __init__(self, missing: Sequence[str] = (), invalid: Sequence[str] = ()) -> None:
        self.missing = sorted(missing)
        self.invalid = sorted(invalid)
        parts: list[str] = []
        if self.missing:
            parts.append(f"Missing required fields: {', '.join(self.missing)}")
        if self.invalid:
            parts.append(f"Invalid fields: {', '.join(self.invalid)}")
        super().__init__("; ".join(parts) or "Invalid user")


class NotFoundError(UserStoreError):
    """The identifier is malformed or matches no stored user."""

    def __init__(self, message: str = "User not found") -> None:
        super().__init__(message)


class StoreUnavailableError(UserStoreError):
    """The backing database could not complete the operation."""
