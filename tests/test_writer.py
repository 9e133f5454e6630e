from unittest.mock import MagicMock

import pytest

from conftest import User
from versionable.encoders import Encoder, PickleEncoder
from versionable.engine.writer import SnapshotWriter
from versionable.models.mutation import MutationEvent
from versionable.models.policy import PolicyConfig
from versionable.persistence.in_memory import InMemorySnapshotStore
from versionable.registry import TypeRegistry, qualified_name


class TestSnapshotWriter:
    @pytest.fixture
    def setup(self):
        registry = TypeRegistry()
        registry.register(User, PolicyConfig(retention_limit=2))
        store = InMemorySnapshotStore()
        return SnapshotWriter(registry, store), registry, store

    def test_write_captures_visible_fields(self, setup):
        writer, _, store = setup
        user = User(id=1, name="A", password="secret")

        snapshot = writer.write(user, actor_id="5")
        assert snapshot.owner == (qualified_name(User), "1")
        assert snapshot.actor_id == "5"
        assert PickleEncoder().decode(snapshot.payload) == {"id": 1, "name": "A"}

    def test_reveals_versioned_hidden_fields(self, setup):
        writer, registry, _ = setup
        registry.configure(User, versioned_hidden_fields={"password"})
        user = User(id=1, name="A", password="secret")

        snapshot = writer.write(user)
        assert PickleEncoder().decode(snapshot.payload)["password"] == "secret"
        assert "password" not in user.to_dict()

    def test_hidden_fields_restored_on_failure(self, setup):
        writer, registry, _ = setup
        encoder = MagicMock(spec=Encoder)
        encoder.encode.side_effect = TypeError("unpicklable")
        registry.configure(User, versioned_hidden_fields={"password"}, encoder=encoder)
        user = User(id=1, name="A", password="secret")

        with pytest.raises(TypeError):
            writer.write(user)
        assert "password" not in user.to_dict()

    def test_reason_truncated(self, setup):
        writer, _, _ = setup
        snapshot = writer.write(User(id=1, name="A"), reason="r" * 250)
        assert len(snapshot.reason) == 100

    def test_empty_reason_stored_as_none(self, setup):
        writer, _, _ = setup
        assert writer.write(User(id=1, name="A"), reason="").reason is None

    def test_applies_retention(self, setup):
        writer, _, store = setup
        user = User(id=1, name="A")
        for _ in range(4):
            writer.write(user)
        assert store.count(qualified_name(User), "1") == 2

    def test_dedicated_store(self, setup):
        writer, registry, default_store = setup
        dedicated = InMemorySnapshotStore()
        registry.configure(User, store=dedicated)

        writer.write(User(id=1, name="A"))
        assert dedicated.count(qualified_name(User), "1") == 1
        assert default_store.count(qualified_name(User), "1") == 0

    def test_write_event_builds_record(self, setup):
        writer, _, _ = setup
        event = MutationEvent(
            owner_type=qualified_name(User),
            owner_id="3",
            values={"id": 3, "name": "C"},
            actor_id="1",
            reason="queued",
        )
        snapshot = writer.write_event(event)
        assert snapshot.owner_id == "3"
        assert snapshot.reason == "queued"
        assert PickleEncoder().decode(snapshot.payload) == {"id": 3, "name": "C"}

    def test_write_event_applies_values_to_record(self, setup):
        writer, _, _ = setup
        current = User(id=3, name="Old", email="c@example.com")
        event = MutationEvent(
            owner_type=qualified_name(User), owner_id="3", values={"name": "New"}
        )
        snapshot = writer.write_event(event, record=current)
        decoded = PickleEncoder().decode(snapshot.payload)
        assert decoded["name"] == "New"
        assert decoded["email"] == "c@example.com"
