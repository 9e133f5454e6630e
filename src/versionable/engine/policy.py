"""Snapshot decision for a single mutation."""

from typing import Any, Mapping, Optional

from versionable.models.policy import PolicyConfig


def effective_dirty_fields(
    dirty_fields: Mapping[str, Any], config: PolicyConfig
) -> set[str]:
    """Dirty fields that count towards an update snapshot.

    Excluded fields, the last-modified timestamp and the soft-delete marker
    are housekeeping and never count.
    """
    ignored = set(config.excluded_fields) | {config.updated_field}
    if config.deleted_field:
        ignored.add(config.deleted_field)
    return set(dirty_fields) - ignored


def should_snapshot(
    is_insert: bool,
    dirty_fields: Mapping[str, Any],
    config: PolicyConfig,
    enabled: Optional[bool] = None,
) -> bool:
    """Decides whether a mutation warrants a new snapshot.

    Args:
        is_insert: Whether the mutation created the record.
        dirty_fields: Changed fields mapped to their previous value.
        config: Policy of the record type.
        enabled: Instance-level override of `config.versioning_enabled`.

    Returns:
        True if a snapshot must be written.
    """
    if enabled is None:
        enabled = config.versioning_enabled
    if not enabled:
        return False

    # the first snapshot captures the initial state whenever any field was set
    if is_insert:
        return len(dirty_fields) > 0

    return len(effective_dirty_fields(dirty_fields, config)) > 0
