"""Tests for the user document store and its revision check."""

import pytest
from sqlmodel import Session

from habit_farm.core import Conflict, NotFound, StaleRecord, UserDocument, UserRecord, UserStore

from ..conftest import NOW


@pytest.fixture
def saved(store, record):
    return store.create(record)


class TestUserStore:

    def test_create_and_load(self, store, saved):
        loaded = store.load("farmer")

        assert loaded.username == "farmer"
        assert loaded.created_at == NOW
        assert loaded.revision == 1
        assert store.exists("farmer")

    def test_missing_user(self, store):
        assert not store.exists("nobody")
        with pytest.raises(NotFound):
            store.load("nobody")

    def test_duplicate_username(self, store, saved):
        with pytest.raises(Conflict):
            store.create(UserRecord(username="farmer", password_hash="x"))

    def test_save_bumps_revision(self, store, saved):
        record = store.load("farmer")
        record.storage["wheat"] = 3

        store.save(record)

        assert record.revision == 2
        assert store.load("farmer").storage == {"wheat": 3}

    def test_stale_write_is_refused(self, store, saved):
        first = store.load("farmer")
        second = store.load("farmer")
        first.total_harvests = 1
        second.total_harvests = 7

        store.save(first)
        with pytest.raises(StaleRecord):
            store.save(second)

        assert store.load("farmer").total_harvests == 1

    def test_stale_write_from_another_session(self, db_engine, store, saved):
        record = store.load("farmer")
        with Session(db_engine) as other_session:
            other = UserStore(other_session)
            concurrent = other.load("farmer")
            concurrent.habit_streak = 3
            other.save(concurrent)

        with pytest.raises(StaleRecord):
            store.save(record)

    def test_write_landing_mid_save_is_refused(self, db_engine, store, saved, monkeypatch):
        record = store.load("farmer")
        record.total_harvests = 1
        connection = store.session.connection

        def other_request_saves_first(*args, **kwargs):
            monkeypatch.setattr(store.session, "connection", connection)
            with Session(db_engine) as other_session:
                other = UserStore(other_session)
                concurrent = other.load("farmer")
                concurrent.habit_streak = 9
                other.save(concurrent)
            return connection(*args, **kwargs)

        monkeypatch.setattr(store.session, "connection", other_request_saves_first)

        with pytest.raises(StaleRecord):
            store.save(record)

        final = store.load("farmer")
        assert final.habit_streak == 9
        assert final.total_harvests == 0
        assert final.revision == 2

    def test_save_unknown_user(self, store):
        with pytest.raises(NotFound):
            store.save(UserRecord(username="ghost", password_hash="x"))

    def test_update_time_is_timezone_aware(self, store, saved):
        assert UserDocument(username="someone").updated_at.tzinfo is not None

        store.save(store.load("farmer"))

        row = store.session.get(UserDocument, "farmer", populate_existing=True)
        assert row.revision == 2
        assert row.updated_at is not None


class TestUserRecord:

    def test_zero_storage_entries_are_dropped(self):
        record = UserRecord.model_validate(
            {"username": "farmer", "passwordHash": "x", "storage": {"wheat": 0, "egg": 2, "corn": -1}}
        )

        assert record.storage == {"egg": 2}

    def test_public_dict_hides_credentials(self, record):
        data = record.public_dict()

        assert "passwordHash" not in data
        assert "revision" not in data
        assert data["maxHabits"] == 3
        assert data["crop"] is None

    def test_max_habits_formula(self, record):
        record.discovered_recipes = ["a"]
        assert record.refresh_max_habits() == 4

        record.discovered_recipes = [str(n) for n in range(8)]
        assert record.refresh_max_habits() == 10
