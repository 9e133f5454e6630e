"""Registry of versioned record types.

Maps owner_type discriminators to record classes and their policy. Snapshots
only store the discriminator, so reverting or rehydrating a snapshot always
goes through this registry.
"""

from typing import Any, Iterator, Optional

from versionable.config import PolicyOverrides
from versionable.errors import TypeResolutionError
from versionable.models.policy import PolicyConfig


def qualified_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


class TypeRegistry:
    """Discriminator to record-type registry with per-type policies."""

    def __init__(self):
        self._types: dict[str, type] = {}
        self._names: dict[type, str] = {}
        self._configs: dict[type, PolicyConfig] = {}

    def register(
        self,
        cls: type,
        config: Optional[PolicyConfig] = None,
        alias: Optional[str] = None,
    ) -> str:
        """Registers a record type.

        Args:
            cls: The record class.
            config: Its snapshot policy. Defaults to PolicyConfig().
            alias: Optional stable discriminator. Defaults to the class's
                qualified name.

        Returns:
            The discriminator stored in snapshots of this type.
        """
        name = alias or qualified_name(cls)
        existing = self._types.get(name)
        if existing is not None and existing is not cls:
            raise ValueError(
                f"Discriminator {name!r} is already bound to {qualified_name(existing)}"
            )
        self._types[name] = cls
        self._names[cls] = name
        self._configs[cls] = config or PolicyConfig()
        return name

    def configure(self, cls: type, **changes: Any) -> PolicyConfig:
        """Replaces individual policy options of a registered type."""
        config = PolicyConfig(**{**dict(self.config_for(cls)), **changes})
        self._configs[self._registered_base(cls)] = config
        return config

    def apply_overrides(self, overrides: dict[str, PolicyOverrides]) -> None:
        """Applies policies loaded with `load_policy_file`.

        Unknown discriminators raise TypeResolutionError so that typos in a
        policy file surface immediately.
        """
        for owner_type, override in overrides.items():
            cls = self.resolve(owner_type)
            current = self._configs.get(cls)
            kwargs = override.policy_kwargs()
            if current is not None and current.store is not None:
                kwargs["store"] = current.store
            self._configs[cls] = PolicyConfig(**kwargs)

    def __contains__(self, obj_or_cls: Any) -> bool:
        return self._find_registered(_as_class(obj_or_cls)) is not None

    def __iter__(self) -> Iterator[type]:
        return iter(self._names)

    def _find_registered(self, cls: type) -> Optional[type]:
        for klass in cls.__mro__:
            if klass in self._configs:
                return klass
        return None

    def _registered_base(self, cls: type) -> type:
        klass = self._find_registered(_as_class(cls))
        if klass is None:
            raise TypeResolutionError(
                f"{qualified_name(_as_class(cls))} is not a registered versionable type"
            )
        return klass

    def discriminator_for(self, obj_or_cls: Any) -> str:
        """Returns the discriminator of the exact runtime type."""
        cls = _as_class(obj_or_cls)
        self._registered_base(cls)
        return self._names.get(cls) or qualified_name(cls)

    def config_for(self, obj_or_cls: Any) -> PolicyConfig:
        """Returns the policy of a type, inherited along the MRO."""
        return self._configs[self._registered_base(obj_or_cls)]

    def resolve(self, owner_type: str) -> type:
        """Resolves a discriminator to its record class.

        Unregistered subclasses of registered types are matched by qualified
        name so that polymorphic owners resolve to their exact runtime type.

        Raises:
            TypeResolutionError: If no known type matches.
        """
        cls = self._types.get(owner_type)
        if cls is not None:
            return cls

        for registered in list(self._names):
            for subclass in _iter_subclasses(registered):
                if qualified_name(subclass) == owner_type:
                    return subclass

        raise TypeResolutionError(f"Unknown owner_type {owner_type!r}")


def _as_class(obj_or_cls: Any) -> type:
    return obj_or_cls if isinstance(obj_or_cls, type) else type(obj_or_cls)


def _iter_subclasses(cls: type) -> Iterator[type]:
    for subclass in cls.__subclasses__():
        yield subclass
        yield from _iter_subclasses(subclass)
