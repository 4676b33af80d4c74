import pytest

from app.services.errors import ValidationError
from app.services.validation import NewUser, validate_new_user, validate_user_patch


def test_validate_new_user_returns_typed_record() -> None:
    user = validate_new_user({"name": "Ada", "username": "ada", "email": "ada@example.com", "extra": 1})
    assert user == NewUser(name="Ada", username="ada", email="ada@example.com", phone=None)


def test_validate_new_user_reports_every_missing_field() -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate_new_user({})
    assert excinfo.value.missing == ["email", "name", "username"]
    assert str(excinfo.value) == "Missing required fields: email, name, username"


def test_validate_new_user_flags_non_string_values() -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate_new_user({"name": ["Ada"], "username": "ada", "email": "ada@example.com", "phone": 123})
    assert excinfo.value.invalid == ["name", "phone"]
    assert excinfo.value.missing == []


def test_blank_phone_is_stored_as_absent() -> None:
    user = validate_new_user({"name": "Ada", "username": "ada", "email": "ada@example.com", "phone": "  "})
    assert user.phone is None


def test_validate_user_patch_keeps_only_supplied_known_fields() -> None:
    patch = validate_user_patch({"name": " New ", "id": "ignored", "unknown": "x"})
    assert patch.changes == {"name": "New"}


def test_validate_user_patch_empty_is_falsy() -> None:
    assert not validate_user_patch({})


def test_validate_user_patch_rejects_emptied_required_field() -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate_user_patch({"username": "   ", "email": None})
    assert excinfo.value.missing == ["email", "username"]
