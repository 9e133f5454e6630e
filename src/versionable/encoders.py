"""Payload encoders for snapshot persistence.

An encoder turns the complete field mapping of a record into the opaque byte
string stored in a snapshot row, and back again.
"""

import pickle
from abc import ABC, abstractmethod
from typing import Any

import pydantic_core

from versionable.errors import DecodeError


class Encoder(ABC):
    """Abstract interface for snapshot payload codecs."""

    name: str = "abstract"

    @abstractmethod
    def encode(self, data: dict[str, Any]) -> bytes:
        """Serializes a field mapping.

        Args:
            data: Field name to value mapping.

        Returns:
            The encoded payload.
        """
        pass  # pragma: no cover

    @abstractmethod
    def decode(self, payload: bytes) -> dict[str, Any]:
        """Deserializes a payload produced by `encode`.

        Args:
            payload: The stored payload.

        Returns:
            The field mapping.

        Raises:
            DecodeError: If the payload is corrupt or not a mapping.
        """
        pass  # pragma: no cover

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def _ensure_mapping(encoder: Encoder, data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise DecodeError(
            f"{encoder.name} payload decoded to {type(data).__name__}, expected a mapping"
        )
    return data


class PickleEncoder(Encoder):
    """Native Python serialization. Round-trips any picklable value exactly."""

    name = "pickle"

    def __init__(self, protocol: int = pickle.HIGHEST_PROTOCOL):
        self.protocol = protocol

    def encode(self, data: dict[str, Any]) -> bytes:
        return pickle.dumps(dict(data), protocol=self.protocol)

    def decode(self, payload: bytes) -> dict[str, Any]:
        try:
            data = pickle.loads(payload)
        except Exception as e:
            raise DecodeError(f"Unable to unpickle snapshot payload: {e}") from e
        return _ensure_mapping(self, data)


class JsonEncoder(Encoder):
    """JSON serialization via pydantic-core.

    Values without a native JSON form (datetimes, decimals, UUIDs) are stored
    in their JSON representation and are decoded as such.
    """

    name = "json"

    def encode(self, data: dict[str, Any]) -> bytes:
        return pydantic_core.to_json(dict(data))

    def decode(self, payload: bytes) -> dict[str, Any]:
        try:
            data = pydantic_core.from_json(payload)
        except ValueError as e:
            raise DecodeError(f"Invalid JSON snapshot payload: {e}") from e
        return _ensure_mapping(self, data)
