import pytest
from unittest.mock import MagicMock

from conftest import Article, FeaturedArticle, User
from versionable.config import PolicyOverrides
from versionable.errors import TypeResolutionError
from versionable.models.policy import PolicyConfig
from versionable.persistence.in_memory import InMemorySnapshotStore
from versionable.registry import TypeRegistry, qualified_name


class TestTypeRegistry:
    @pytest.fixture
    def registry(self):
        return TypeRegistry()

    def test_register_default_discriminator(self, registry):
        name = registry.register(User)
        assert name == qualified_name(User)
        assert registry.resolve(name) is User
        assert registry.discriminator_for(User(name="x")) == name
        assert registry.config_for(User).retention_limit == 0

    def test_register_alias(self, registry):
        assert registry.register(User, alias="user") == "user"
        assert registry.resolve("user") is User
        assert registry.discriminator_for(User) == "user"

    def test_alias_conflict(self, registry):
        registry.register(User, alias="thing")
        with pytest.raises(ValueError):
            registry.register(Article, alias="thing")

    def test_reregister_same_class(self, registry):
        registry.register(User, PolicyConfig(retention_limit=1))
        registry.register(User, PolicyConfig(retention_limit=5))
        assert registry.config_for(User).retention_limit == 5

    def test_membership(self, registry):
        registry.register(Article)
        assert Article in registry
        assert FeaturedArticle(title="t") in registry
        assert User not in registry
        assert list(registry) == [Article]

    def test_subclass_inherits_policy(self, registry):
        registry.register(Article, PolicyConfig(retention_limit=3))
        assert registry.config_for(FeaturedArticle).retention_limit == 3

    def test_subclass_discriminator_is_runtime_type(self, registry):
        registry.register(Article, alias="article")
        name = registry.discriminator_for(FeaturedArticle(title="t"))
        assert name == qualified_name(FeaturedArticle)
        assert registry.resolve(name) is FeaturedArticle

    def test_unregistered_type(self, registry):
        with pytest.raises(TypeResolutionError):
            registry.config_for(User)
        with pytest.raises(TypeResolutionError):
            registry.discriminator_for(User)

    def test_unknown_discriminator(self, registry):
        registry.register(User)
        with pytest.raises(TypeResolutionError) as exc:
            registry.resolve("app.models.Missing")
        assert exc.value.code == "owner_type.unresolved"

    def test_configure(self, registry):
        registry.register(Article)
        config = registry.configure(FeaturedArticle, excluded_fields=["title"])
        assert config.excluded_fields == frozenset({"title"})
        assert registry.config_for(Article) is config

    def test_apply_overrides_keeps_store(self, registry):
        store = InMemorySnapshotStore()
        registry.register(User, PolicyConfig(store=store))
        registry.apply_overrides(
            {qualified_name(User): PolicyOverrides(retention_limit=4, encoder="json")}
        )
        config = registry.config_for(User)
        assert config.retention_limit == 4
        assert config.encoder.name == "json"
        assert config.store is store

    def test_apply_overrides_unknown_type(self, registry):
        with pytest.raises(TypeResolutionError):
            registry.apply_overrides({"nope.Nothing": PolicyOverrides()})

    def test_store_accepts_any_snapshot_store(self, registry):
        from versionable.persistence.repository import SnapshotStore

        store = MagicMock(spec=SnapshotStore)
        registry.register(User, PolicyConfig(store=store))
        assert registry.config_for(User).store is store
