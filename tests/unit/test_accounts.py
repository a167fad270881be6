"""Tests for registration, login and client-side saves."""

from datetime import timedelta

import pytest

from habit_farm.core import Conflict, NotFound, Unauthenticated, ValidationError
from habit_farm.core.accounts import login_user, merge_client_data, register_user
from habit_farm.core.security import decode_access_token

from ..conftest import NOW


class TestRegister:

    def test_creates_record(self, store):
        register_user(store, "farmer", "secret123", NOW)

        record = store.load("farmer")
        assert record.password_hash != "secret123"
        assert record.max_habits == 3
        assert record.habits == []
        assert record.crop is None
        assert record.created_at == NOW
        assert record.last_login == NOW

    @pytest.mark.parametrize("username,password", [
        ("", "secret123"),
        ("farmer", ""),
        (None, None),
        ("ab", "secret123"),
        ("a" * 21, "secret123"),
        ("farmer", "12345"),
    ])
    def test_invalid_input(self, store, username, password):
        with pytest.raises(ValidationError):
            register_user(store, username, password, NOW)

    def test_duplicate(self, store):
        register_user(store, "farmer", "secret123", NOW)

        with pytest.raises(Conflict):
            register_user(store, "farmer", "other-password", NOW)


class TestLogin:

    @pytest.fixture(autouse=True)
    def registered(self, store):
        register_user(store, "farmer", "secret123", NOW)

    def test_returns_token_and_updates_last_login(self, store):
        later = NOW + timedelta(days=2)

        token, record = login_user(store, "farmer", "secret123", later)

        assert decode_access_token(token) == "farmer"
        assert record.max_habits == 3
        assert store.load("farmer").last_login == later

    def test_wrong_password(self, store):
        with pytest.raises(Unauthenticated):
            login_user(store, "farmer", "wrong-password", NOW)

    def test_unknown_user(self, store):
        with pytest.raises(NotFound):
            login_user(store, "nobody", "secret123", NOW)

    def test_idle_user_can_log_in_again(self, store):
        later = NOW + timedelta(days=45)

        login_user(store, "farmer", "secret123", later)

        assert store.load("farmer").last_login == later


class TestMergeClientData:

    def test_applies_client_fields(self, record):
        merged = merge_client_data(record, {"storage": {"wheat": 4}, "habitStreak": 2})

        assert merged.storage == {"wheat": 4}
        assert merged.habit_streak == 2

    def test_server_fields_are_ignored(self, record):
        merged = merge_client_data(
            record, {"username": "mallory", "passwordHash": "x", "revision": 99, "lastLogin": None}
        )

        assert merged.username == "farmer"
        assert merged.password_hash == record.password_hash
        assert merged.revision == record.revision
        assert merged.last_login == record.last_login

    def test_discovered_recipes_only_grow(self, record):
        record.discovered_recipes = ["bread"]

        merged = merge_client_data(record, {"discoveredRecipes": ["pancake", "pancake"]})

        assert merged.discovered_recipes == ["bread", "pancake"]
        assert merged.max_habits == 5

    def test_invalid_types(self, record):
        with pytest.raises(ValidationError) as excinfo:
            merge_client_data(record, {"totalHarvests": "lots"})

        assert excinfo.value.details["errors"]
