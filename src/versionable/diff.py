"""Structural difference between two decoded snapshot payloads."""

from typing import Any, Iterable


def compute_snapshot_diff(
    left: dict[str, Any],
    right: dict[str, Any],
    excluded: Iterable[str] = (),
) -> dict[str, Any]:
    """Computes the fields of `left` that differ from `right`.

    Nested mappings present on both sides are compared key by key and only
    contribute when at least one nested key differs. A mapping on the left
    whose counterpart is missing or not a mapping is reported wholesale.

    Args:
        left: Payload whose values are reported.
        right: Payload compared against.
        excluded: Top-level fields dropped from the result.

    Returns:
        A mapping of differing field names to their value in `left`.
    """
    diff: dict[str, Any] = {}

    for key, value in left.items():
        if key not in right:
            diff[key] = value
            continue

        other = right[key]
        if isinstance(value, dict) and isinstance(other, dict):
            nested = compute_snapshot_diff(value, other)
            if nested:
                diff[key] = nested
        elif value != other:
            diff[key] = value

    for key in excluded:
        diff.pop(key, None)

    return diff
