"""Construction of record instances from field mappings."""

from typing import Any, Iterable, Mapping

from sqlalchemy import inspect
from sqlalchemy.orm import make_transient_to_detached


def new_record(cls: type, values: Mapping[str, Any], skip: Iterable[str] = ()):
    """Builds an instance of `cls` without running its constructor.

    Args:
        cls: Mapped record class.
        values: Field values to populate.
        skip: Fields left unset.

    Returns:
        A transient instance carrying `values`.
    """
    skipped = set(skip)
    record = inspect(cls).class_manager.new_instance()
    for key, value in values.items():
        if key not in skipped:
            setattr(record, key, value)
    return record


def mark_persisted(record):
    """Marks a transient record as representing an existing row."""
    make_transient_to_detached(record)
    return record


def coerce_primary_key(cls: type, owner_id: str):
    """Converts a stored owner_id back to the primary key column's type."""
    column = inspect(cls).primary_key[0]
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return owner_id
    if python_type is str:
        return owner_id
    return python_type(owner_id)
