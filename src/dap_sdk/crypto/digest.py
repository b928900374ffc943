"""
Canonical digests of structured payloads

A digest is computed by:

1. Normalising the payload into the JSON value model (null, bool, number,
   string, array, object with string keys).
2. Serializing it as per RFC 8785: JSON Canonicalization Scheme (JCS), which
   sorts object keys at every level and fixes number/string formatting.
3. Computing the SHA-256 hash of the canonical bytes.

Two payloads that differ only in object key order produce identical digests;
array element order is significant.
"""

import hashlib
from collections.abc import Mapping
from typing import Any, Dict, Set

import rfc8785

from ..exceptions import SerializationError, SerializationErrorCodes

DIGEST_LENGTH = 32


def _normalize(value: Any, path: str, active: Set[int]) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value

    if not isinstance(value, (Mapping, list, tuple)):
        raise SerializationError(
            f"Unsupported value of type {type(value).__name__} at {path}",
            SerializationErrorCodes.UNSUPPORTED_TYPE,
            {'path': path}
        )

    # Containers on the current path; seeing one again means a cycle
    if id(value) in active:
        raise SerializationError(
            f"Circular reference at {path}",
            SerializationErrorCodes.CIRCULAR_REFERENCE,
            {'path': path}
        )
    active.add(id(value))

    try:
        if isinstance(value, Mapping):
            normalized = {}
            for key, item in value.items():
                if not isinstance(key, str):
                    raise SerializationError(
                        f"Object keys must be strings, got {type(key).__name__} at {path}",
                        SerializationErrorCodes.NON_STRING_KEY,
                        {'path': path}
                    )
                normalized[key] = _normalize(item, f"{path}.{key}", active)
            return normalized

        return [_normalize(item, f"{path}[{index}]", active) for index, item in enumerate(value)]
    finally:
        active.discard(id(value))


def canonicalize(payload: Mapping) -> bytes:
    """
    Serialize a payload into RFC 8785 canonical JSON bytes.

    Args:
        payload: Mapping of string keys to JSON-compatible values

    Returns:
        bytes: UTF-8 canonical JSON

    Raises:
        SerializationError: If the payload holds values outside the JSON model
            or numbers that JCS cannot represent, contains itself, or is nested
            too deeply
    """
    if not isinstance(payload, Mapping):
        raise SerializationError(
            f"Payload must be a mapping, got {type(payload).__name__}",
            SerializationErrorCodes.UNSUPPORTED_TYPE
        )

    try:
        normalized: Dict[str, Any] = _normalize(payload, '$', set())
        return rfc8785.dumps(normalized)
    except RecursionError as e:
        raise SerializationError(
            "Payload is nested too deeply to canonicalize",
            SerializationErrorCodes.NESTING_TOO_DEEP
        ) from e
    except rfc8785.CanonicalizationError as e:
        raise SerializationError(
            f"Payload cannot be canonicalized: {e}",
            SerializationErrorCodes.NUMBER_OUT_OF_RANGE,
            {'original_error': str(e)}
        ) from e


def digest(payload: Mapping) -> bytes:
    """
    Compute the SHA-256 digest of the canonicalized payload.

    Returns:
        bytes: The raw 32-byte digest
    """
    return hashlib.sha256(canonicalize(payload)).digest()
