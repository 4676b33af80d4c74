import uuid

import pytest
from sqlalchemy.exc import OperationalError

from app.services.errors import NotFoundError, StoreUnavailableError, ValidationError
from app.services.user_store import UserStore, parse_user_id

TEST_USER = {
    "name": "Test User",
    "username": "testuser",
    "email": "test@example.com",
    "phone": "1234567890",
}


def test_create_then_get_returns_equal_record(store: UserStore) -> None:
    created = store.create(TEST_USER)
    assert created.id
    assert store.get(created.id) == created


def test_list_is_empty_then_grows_with_each_create(store: UserStore) -> None:
    assert store.list_users() == []
    for i in range(4):
        store.create({**TEST_USER, "username": f"user{i}"})
    assert len(store.list_users()) == 4


def test_create_missing_fields_raises_and_persists_nothing(store: UserStore) -> None:
    with pytest.raises(ValidationError) as excinfo:
        store.create({"name": "Incomplete User"})
    assert excinfo.value.missing == ["email", "username"]
    assert store.list_users() == []


def test_create_strips_surrounding_whitespace(store: UserStore) -> None:
    created = store.create({**TEST_USER, "name": "  Test User  "})
    assert created.name == "Test User"


def test_get_unknown_id_raises_not_found(store: UserStore) -> None:
    with pytest.raises(NotFoundError):
        store.get(str(uuid.uuid4()))


@pytest.mark.parametrize("raw", ["507f1f77bcf86cd799439011", "", "abc", None, 12])
def test_malformed_ids_are_not_found(store: UserStore, raw) -> None:
    with pytest.raises(NotFoundError):
        store.get(raw)
    with pytest.raises(NotFoundError):
        store.update(raw, {"name": "x"})
    with pytest.raises(NotFoundError):
        store.delete(raw)


def test_parse_user_id_round_trips_string_form() -> None:
    value = uuid.uuid4()
    assert parse_user_id(str(value)) == value
    assert parse_user_id(value) is value


def test_update_changes_only_supplied_fields(store: UserStore) -> None:
    created = store.create(TEST_USER)

    updated = store.update(created.id, {"username": "renamed"})

    assert updated.id == created.id
    assert updated.username == "renamed"
    assert updated.name == created.name
    assert updated.email == created.email
    assert updated.phone == created.phone
    assert store.get(created.id) == updated


def test_update_with_no_fields_leaves_record_unchanged(store: UserStore) -> None:
    created = store.create(TEST_USER)
    assert store.update(created.id, {}) == created


def test_update_can_clear_phone(store: UserStore) -> None:
    created = store.create(TEST_USER)
    updated = store.update(created.id, {"phone": None})
    assert updated.phone is None


def test_update_unknown_id_is_not_found_before_validation(store: UserStore) -> None:
    with pytest.raises(NotFoundError):
        store.update(str(uuid.uuid4()), {"name": ""})


def test_delete_removes_record(store: UserStore) -> None:
    created = store.create(TEST_USER)
    store.delete(created.id)

    with pytest.raises(NotFoundError):
        store.get(created.id)
    with pytest.raises(NotFoundError):
        store.delete(created.id)


def test_database_errors_become_store_unavailable(store: UserStore) -> None:
    with pytest.raises(StoreUnavailableError):
        with store.session():
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))


def test_ping(store: UserStore) -> None:
    assert store.ping() is True
