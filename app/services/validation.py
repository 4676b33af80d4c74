"""Pure validation of user payloads.

Input is any mapping of field name to value (a parsed JSON body, a dict built in
a test). Output is a typed record the store can persist as is, or a
``ValidationError`` naming every offending field at once.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from app.services.errors import ValidationError

REQUIRED_FIELDS: tuple[str, ...] = ("name", "username", "email")
OPTIONAL_FIELDS: tuple[str, ...] = ("phone",)
USER_FIELDS: tuple[str, ...] = REQUIRED_FIELDS + OPTIONAL_FIELDS


@dataclass(frozen=True)
class NewUser:
    name: str
    username: str
    email: str
    phone: str | None = None


@dataclass(frozen=True)
class UserPatch:
    changes: dict[str, str | None] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return bool(self.changes)


def _clean(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise TypeError(value)
    stripped = value.strip()
    return stripped or None


def validate_new_user(fields: Mapping[str, Any]) -> NewUser:
    missing: list[str] = []
    invalid: list[str] = []
    cleaned: dict[str, str | None] = {}

    for name in USER_FIELDS:
        try:
            cleaned[name] = _clean(fields.get(name))
        except TypeError:
            invalid.append(name)
            continue
        if name in REQUIRED_FIELDS and cleaned[name] is None:
            missing.append(name)

    if missing or invalid:
        raise ValidationError(missing=missing, invalid=invalid)

    return NewUser(**cleaned)  # type: ignore[arg-type]


def validate_user_patch(fields: Mapping[str, Any]) -> UserPatch:
    """Keep only supplied user fields; unknown keys (including ``id``) are dropped.

    Fields that are not supplied are never checked. A supplied required field
    must still be a non-empty string, while ``phone`` may be cleared with null.
    """

    missing: list[str] = []
    invalid: list[str] = []
    changes: dict[str, str | None] = {}

    for name in USER_FIELDS:
        if name not in fields:
            continue
        try:
            value = _clean(fields[name])
        except TypeError:
            invalid.append(name)
            continue
        if name in REQUIRED_FIELDS and value is None:
            missing.append(name)
            continue
        changes[name] = value

    if missing or invalid:
        raise ValidationError(missing=missing, invalid=invalid)

    return UserPatch(changes=changes)
