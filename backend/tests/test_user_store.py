import pytest
from users_api.core.exceptions import NotFoundError
from users_api.models.location import Location
from users_api.storage.user_store import UserStore


@pytest.fixture
def store(db_session):
    return UserStore(db_session)


def test_insert_nests_locations_and_credential(store, db_session):
    user = store.insert(
        {"name": "Alice", "salary": 10, "status": False},
        locations=[{"country": "NL"}, {"country": "BE"}],
        password_hash="$2b$04$hash",
    )
    db_session.commit()

    loaded = store.find_one(user.id, include_credential=True)
    assert [loc.country for loc in loaded.locations] == ["NL", "BE"]
    assert loaded.credential.password == "$2b$04$hash"


def test_find_all_empty(store):
    assert store.find_all() == []


def test_find_one_missing(store):
    with pytest.raises(NotFoundError):
        store.find_one(42)


def test_find_by_name_prefers_lowest_id(store, db_session):
    first = store.insert({"name": "Sam"})
    store.insert({"name": "SAM"})
    db_session.commit()

    assert store.find_by_name("sam").id == first.id
    assert store.find_by_name("nobody") is None


def test_update_only_touches_given_fields(store, db_session):
    user = store.insert({"name": "Alice", "salary": 10, "status": True})
    db_session.commit()

    store.update(user, {"status": None})
    db_session.commit()

    assert user.name == "Alice"
    assert user.salary == 10
    assert user.status is None


def test_set_credential_replaces_hash(store, db_session):
    user = store.insert({"name": "Alice"}, password_hash="old")
    db_session.commit()

    store.set_credential(user, "new")
    db_session.commit()

    assert store.find_one(user.id, include_credential=True).credential.password == "new"


def test_remove_deletes_dependents(store, db_session):
    user = store.insert({"name": "Alice"}, locations=[{"country": "NL"}], password_hash="h")
    db_session.commit()
    user_id = user.id

    store.remove(user_id)
    db_session.commit()

    assert db_session.query(Location).count() == 0
    with pytest.raises(NotFoundError):
        store.find_one(user_id)


def test_remove_missing_user(store):
    with pytest.raises(NotFoundError):
        store.remove(42)
