"""The Versionable capability and its SQLAlchemy implementation.

The lifecycle hooks and the engine only depend on the `Versionable` protocol.
`VersionableMixin` implements it for declarative SQLAlchemy classes:

    class User(VersionableMixin, Base):
        __tablename__ = "users"
        __hidden__ = ("password",)
        ...
"""

from contextlib import contextmanager
from typing import Any, ContextManager, Iterable, Iterator, Optional, Protocol

from sqlalchemy import inspect


class Versionable(Protocol):
    """Capability a record must expose to be versioned."""

    @property
    def versioning_enabled(self) -> Optional[bool]: ...

    def versionable_key(self) -> str: ...

    def versionable_values(self) -> dict[str, Any]: ...

    def versionable_dirty(self) -> dict[str, Any]: ...

    def revealed(self, fields: Iterable[str]) -> ContextManager[Any]: ...

    def pop_version_reason(self) -> Optional[str]: ...


class VersionableMixin:
    """Versioning support for SQLAlchemy declarative models.

    Attributes:
        __hidden__: Column keys concealed from `to_dict()` unless revealed.
    """

    __hidden__: tuple[str, ...] = ()

    # instance-level switches, not mapped
    _versioning_enabled: Optional[bool] = None
    _version_reason: Optional[str] = None
    _revealed_fields: frozenset = frozenset()

    @classmethod
    def versionable_fields(cls) -> list[str]:
        """Column attribute keys of the mapped class."""
        return [attr.key for attr in inspect(cls).column_attrs]

    @property
    def versioning_enabled(self) -> Optional[bool]:
        """Instance override of the type policy; None defers to the policy."""
        return self._versioning_enabled

    def enable_versioning(self):
        self._versioning_enabled = True
        return self

    def disable_versioning(self):
        self._versioning_enabled = False
        return self

    def set_version_reason(self, reason: Optional[str]):
        """Attaches a reason to the next snapshot of this record."""
        self._version_reason = reason or None
        return self

    def pop_version_reason(self) -> Optional[str]:
        reason = self._version_reason
        self._version_reason = None
        return reason

    def versionable_key(self) -> str:
        """Returns the primary key as a string.

        Raises:
            ValueError: If the key is composite or not assigned yet.
        """
        mapper = inspect(type(self))
        if len(mapper.primary_key) != 1:
            raise ValueError(
                f"{type(self).__name__} has a composite primary key; only single-column keys are versionable"
            )
        key_attr = mapper.get_property_by_column(mapper.primary_key[0]).key
        value = getattr(self, key_attr)
        if value is None:
            raise ValueError(f"{type(self).__name__} has no primary key yet")
        return str(value)

    def _concealed_fields(self) -> set[str]:
        return set(self.__hidden__) - set(self._revealed_fields)

    def to_dict(self) -> dict[str, Any]:
        """Serializes column values, omitting concealed fields.

        Expired attributes are loaded when the record is attached to a
        session; otherwise only values already present are included.
        """
        state = inspect(self)
        concealed = self._concealed_fields()
        data = {}
        for key in self.versionable_fields():
            if key in concealed:
                continue
            if key in state.dict:
                data[key] = state.dict[key]
            elif state.session is not None and state.has_identity:
                data[key] = getattr(self, key)
        return data

    def versionable_values(self) -> dict[str, Any]:
        return self.to_dict()

    def versionable_dirty(self) -> dict[str, Any]:
        """Returns changed fields mapped to their value before the change."""
        state = inspect(self)
        dirty = {}
        for key in self.versionable_fields():
            history = state.attrs[key].history
            if history.added:
                dirty[key] = history.deleted[0] if history.deleted else None
        return dirty

    @contextmanager
    def revealed(self, fields: Iterable[str]) -> Iterator["VersionableMixin"]:
        """Temporarily includes hidden fields in `to_dict()`."""
        previous = self._revealed_fields
        self._revealed_fields = frozenset(previous) | frozenset(fields)
        try:
            yield self
        finally:
            self._revealed_fields = previous
