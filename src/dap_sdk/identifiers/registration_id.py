"""
Registration identifiers

A registration ID is a TypeID with the type prefix ``reg``: the prefix, an
underscore, and a 26 character lowercase Crockford base32 encoding of a
128-bit UUIDv7.

UUIDv7 layout (big-endian):

    bytes 0-5   Unix time in milliseconds (48 bits)
    byte  6     version nibble (0x7) + 4 random bits
    byte  7     random
    byte  8     variant bits (0b10) + 6 random bits
    bytes 9-15  random

The 48-bit timestamp width is part of the identifier format. Timestamps are
read back from the decoded bytes, never from positions in the string form.
The full 48-bit range reaches past year 9999, which is the last year a
``datetime`` can hold, so ``extract_date`` rejects such IDs while
``extract_timestamp`` still returns them.
"""

import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from uuid6 import uuid7

from ..exceptions import InvalidRegistrationIdError, IdentifierErrorCodes

TYPE_PREFIX = 'reg'
TYPE_SEPARATOR = '_'

ID_LENGTH = 16
TIMESTAMP_LENGTH = 6
MAX_TIMESTAMP_MS = (1 << (TIMESTAMP_LENGTH * 8)) - 1

SUFFIX_LENGTH = 26
ALPHABET = '0123456789abcdefghjkmnpqrstvwxyz'
_DECODE_MAP = {char: index for index, char in enumerate(ALPHABET)}

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
MAX_DATE_MS = (datetime.max.replace(tzinfo=timezone.utc) - _EPOCH) // timedelta(milliseconds=1)


def _current_time_ms() -> int:
    return time.time_ns() // 1_000_000


def _new_uuid7(timestamp_ms: int) -> bytes:
    # uuid7() supplies the version, variant and random bits
    return timestamp_ms.to_bytes(TIMESTAMP_LENGTH, 'big') + uuid7().bytes[TIMESTAMP_LENGTH:]


def encode_base32(value: bytes) -> str:
    """
    Encode 16 bytes as 26 Crockford base32 characters.

    130 bits of output hold the 128-bit value, so the leading character is
    always in ``0``-``7``.
    """
    number = int.from_bytes(value, 'big')
    chars = []
    for _ in range(SUFFIX_LENGTH):
        chars.append(ALPHABET[number & 0x1F])
        number >>= 5
    return ''.join(reversed(chars))


def decode_base32(suffix: str) -> bytes:
    """
    Decode a 26 character Crockford base32 suffix into 16 bytes.

    Raises:
        InvalidRegistrationIdError: On wrong length or characters outside the alphabet
    """
    if len(suffix) != SUFFIX_LENGTH:
        raise InvalidRegistrationIdError(
            f"Invalid length: suffix must be {SUFFIX_LENGTH} characters, got {len(suffix)}",
            IdentifierErrorCodes.WRONG_LENGTH,
            {'suffix': suffix}
        )

    number = 0
    for char in suffix:
        index = _DECODE_MAP.get(char)
        if index is None:
            raise InvalidRegistrationIdError(
                f"Invalid suffix character: {char!r}",
                IdentifierErrorCodes.INVALID_CHARACTER,
                {'suffix': suffix}
            )
        number = (number << 5) | index

    if suffix[0] > '7':
        raise InvalidRegistrationIdError(
            "Invalid suffix: first character must be in 0-7",
            IdentifierErrorCodes.INVALID_CHARACTER,
            {'suffix': suffix}
        )

    return number.to_bytes(ID_LENGTH, 'big')


@dataclass(frozen=True, order=True)
class RegistrationId:
    """
    Unique, time-ordered identifier for a DAP registration.

    Instances compare by their raw bytes, which orders IDs created at
    different milliseconds by creation time.

    Attributes:
        value: The 16 raw UUIDv7 bytes
    """
    value: bytes

    def __post_init__(self):
        if not isinstance(self.value, bytes) or len(self.value) != ID_LENGTH:
            raise InvalidRegistrationIdError(
                f"Invalid length: registration ID must be exactly {ID_LENGTH} bytes",
                IdentifierErrorCodes.WRONG_LENGTH
            )

    @classmethod
    def create(cls, *, timestamp_ms: Optional[int] = None) -> 'RegistrationId':
        """
        Create a fresh registration ID.

        Args:
            timestamp_ms: Creation time to embed, in ms since the Unix epoch
                (uses the current wall clock if None)

        Returns:
            RegistrationId: A new ID

        Raises:
            InvalidRegistrationIdError: If the timestamp does not fit in 48 bits
        """
        if timestamp_ms is None:
            timestamp_ms = _current_time_ms()

        if not isinstance(timestamp_ms, int) or not 0 <= timestamp_ms <= MAX_TIMESTAMP_MS:
            raise InvalidRegistrationIdError(
                f"Timestamp out of range: {timestamp_ms}",
                IdentifierErrorCodes.TIMESTAMP_OUT_OF_RANGE
            )

        return cls(_new_uuid7(timestamp_ms))

    @classmethod
    def parse(cls, registration_id: str) -> 'RegistrationId':
        """
        Parse the string form of a registration ID.

        Args:
            registration_id: String of the form ``reg_<26 base32 chars>``

        Returns:
            RegistrationId: The parsed ID

        Raises:
            InvalidRegistrationIdError: With ``WRONG_PREFIX``, ``WRONG_LENGTH`` or
                ``INVALID_CHARACTER`` as the error code
        """
        if not isinstance(registration_id, str):
            raise InvalidRegistrationIdError("Registration ID must be a string", IdentifierErrorCodes.INVALID_TYPE)

        prefix, separator, suffix = registration_id.rpartition(TYPE_SEPARATOR)
        if not separator:
            suffix = registration_id

        if prefix != TYPE_PREFIX:
            raise InvalidRegistrationIdError(
                f'Registration ID prefix must be "{TYPE_PREFIX}"',
                IdentifierErrorCodes.WRONG_PREFIX,
                {'prefix': prefix}
            )

        return cls(decode_base32(suffix))

    def extract_timestamp(self) -> int:
        """
        Extract the creation time embedded in the ID.

        Returns:
            int: Milliseconds since the Unix epoch
        """
        return int.from_bytes(self.value[:TIMESTAMP_LENGTH], 'big')

    def extract_date(self) -> datetime:
        """
        Creation time as a timezone-aware UTC datetime.

        Raises:
            InvalidRegistrationIdError: If the timestamp lies after year 9999
        """
        timestamp_ms = self.extract_timestamp()
        if timestamp_ms > MAX_DATE_MS:
            raise InvalidRegistrationIdError(
                f"Timestamp out of range: {timestamp_ms} is past the latest representable date",
                IdentifierErrorCodes.TIMESTAMP_OUT_OF_RANGE,
                {'timestamp_ms': timestamp_ms}
            )
        return _EPOCH + timedelta(milliseconds=timestamp_ms)

    def to_uuid(self) -> uuid.UUID:
        return uuid.UUID(bytes=self.value)

    def __str__(self) -> str:
        return f'{TYPE_PREFIX}{TYPE_SEPARATOR}{encode_base32(self.value)}'

    def __repr__(self) -> str:
        return f"RegistrationId('{self}')"
