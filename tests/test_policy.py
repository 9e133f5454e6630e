import pytest
from pydantic import ValidationError

from versionable.engine.policy import effective_dirty_fields, should_snapshot
from versionable.models.policy import PolicyConfig


class TestShouldSnapshot:
    def test_insert_with_fields(self):
        assert should_snapshot(True, {"name": None}, PolicyConfig())

    def test_insert_without_fields(self):
        assert not should_snapshot(True, {}, PolicyConfig())

    def test_insert_only_excluded_fields_still_snapshots(self):
        config = PolicyConfig(excluded_fields={"last_login"})
        assert should_snapshot(True, {"last_login": None}, config)

    def test_update_with_real_change(self):
        assert should_snapshot(False, {"name": "A", "updated_at": None}, PolicyConfig())

    def test_update_only_timestamp(self):
        assert not should_snapshot(False, {"updated_at": None}, PolicyConfig())

    def test_update_only_excluded(self):
        config = PolicyConfig(excluded_fields=["last_login"])
        assert not should_snapshot(False, {"last_login": "x", "updated_at": None}, config)

    def test_update_only_soft_delete_marker(self):
        config = PolicyConfig(deleted_field="deleted_at")
        assert not should_snapshot(False, {"deleted_at": None}, config)

    def test_custom_timestamp_field(self):
        config = PolicyConfig(updated_field="modified")
        assert not should_snapshot(False, {"modified": None}, config)
        assert should_snapshot(False, {"updated_at": None}, config)

    def test_disabled_type(self):
        config = PolicyConfig(versioning_enabled=False)
        assert not should_snapshot(True, {"name": None}, config)
        assert not should_snapshot(False, {"name": "A"}, config)

    def test_instance_override(self):
        assert not should_snapshot(False, {"name": "A"}, PolicyConfig(), enabled=False)
        config = PolicyConfig(versioning_enabled=False)
        assert should_snapshot(False, {"name": "A"}, config, enabled=True)

    def test_effective_dirty_fields(self):
        config = PolicyConfig(excluded_fields={"a"}, deleted_field="deleted_at")
        dirty = {"a": 1, "b": 2, "updated_at": None, "deleted_at": None}
        assert effective_dirty_fields(dirty, config) == {"b"}


class TestPolicyConfig:
    def test_defaults(self):
        config = PolicyConfig()
        assert config.versioning_enabled is True
        assert config.excluded_fields == frozenset()
        assert config.retention_limit == 0
        assert config.encoder.name == "pickle"
        assert config.store is None
        assert config.housekeeping_fields == {"created_at", "updated_at"}

    def test_field_sets_are_coerced(self):
        config = PolicyConfig(excluded_fields="last_login", versioned_hidden_fields=["password"])
        assert config.excluded_fields == frozenset({"last_login"})
        assert config.versioned_hidden_fields == frozenset({"password"})

    def test_housekeeping_includes_soft_delete(self):
        config = PolicyConfig(deleted_field="deleted_at")
        assert "deleted_at" in config.housekeeping_fields

    def test_negative_retention_rejected(self):
        with pytest.raises(ValidationError):
            PolicyConfig(retention_limit=-1)

    def test_unknown_option_rejected(self):
        with pytest.raises(ValidationError):
            PolicyConfig(keep_forever=True)

    def test_frozen(self):
        config = PolicyConfig()
        with pytest.raises(ValidationError):
            config.retention_limit = 5
