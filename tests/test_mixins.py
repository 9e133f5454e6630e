import pytest
from sqlalchemy import inspect

from conftest import User
from versionable.engine.hydration import coerce_primary_key, mark_persisted, new_record
from versionable.mixins import Versionable


class TestVersionableMixin:
    def test_protocol(self):
        user = User(name="A")
        # Structural capability used by the engine
        for attr in Versionable.__dict__:
            if not attr.startswith("_"):
                assert hasattr(user, attr)

    def test_to_dict_conceals_hidden(self):
        user = User(id=1, name="A", password="secret")
        assert user.to_dict() == {"id": 1, "name": "A"}

    def test_revealed_restores(self):
        user = User(id=1, name="A", password="secret")
        with user.revealed(["password"]) as revealed:
            assert revealed.to_dict()["password"] == "secret"
        assert "password" not in user.to_dict()

    def test_revealed_restores_on_error(self):
        user = User(id=1, name="A", password="secret")
        with pytest.raises(RuntimeError):
            with user.revealed(["password"]):
                raise RuntimeError("encode failed")
        assert "password" not in user.to_dict()

    def test_versionable_key(self):
        assert User(id=12, name="A").versionable_key() == "12"
        with pytest.raises(ValueError):
            User(name="A").versionable_key()

    def test_dirty_on_new_record(self):
        user = User(name="A", email=None)
        assert user.versionable_dirty() == {"name": None, "email": None}

    def test_dirty_after_load(self, manager, session_factory, saved_user):
        with session_factory() as session:
            user = session.get(User, saved_user.id)
            assert user.versionable_dirty() == {}
            user.name = "B"
            assert user.versionable_dirty() == {"name": "A"}

    def test_switches(self):
        user = User(name="A")
        assert user.versioning_enabled is None
        assert user.disable_versioning().versioning_enabled is False
        assert user.enable_versioning().versioning_enabled is True

    def test_reason_popped_once(self):
        user = User(name="A").set_version_reason("because")
        assert user.pop_version_reason() == "because"
        assert user.pop_version_reason() is None

    def test_versionable_fields(self):
        assert set(User.versionable_fields()) == {
            "id",
            "name",
            "email",
            "password",
            "last_login",
            "created_at",
            "updated_at",
            "deleted_at",
        }


class TestHydration:
    def test_new_record_skips_fields(self):
        user = new_record(User, {"id": 1, "name": "A", "updated_at": None}, skip={"updated_at"})
        assert user.name == "A"
        assert "updated_at" not in inspect(user).dict

    def test_mark_persisted(self):
        user = mark_persisted(new_record(User, {"id": 1, "name": "A"}))
        state = inspect(user)
        assert state.detached
        assert state.key is not None

    def test_coerce_primary_key(self):
        assert coerce_primary_key(User, "5") == 5
