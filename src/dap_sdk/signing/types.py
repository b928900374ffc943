"""
Type definitions for compact JWS signing

This module provides the signer capability protocol and the value types of
the compact JWS wire format (RFC 7515 section 7.1) with detached payload
support (RFC 7515 Appendix F).
"""

from typing import Any, Awaitable, Dict, Optional, Protocol, Union, runtime_checkable
from dataclasses import dataclass

from ..crypto.utils import object_to_base64url, base64url_to_object

SEGMENT_SEPARATOR = '.'


@runtime_checkable
class Signer(Protocol):
    """
    Protocol for signer implementations

    A signer owns private key material and never exposes it; it only signs
    the bytes it is given. ``sign`` may return the signature directly or an
    awaitable resolving to it (e.g. for remote key stores).
    """

    algorithm: str
    key_id: str

    def sign(self, data: bytes) -> Union[bytes, Awaitable[bytes]]:
        """Sign ``data`` and return the raw signature bytes"""
        ...


@dataclass(frozen=True)
class JwsHeader:
    """
    Protected header of a compact JWS

    Attributes:
        alg: Signature algorithm identifier (e.g. "EdDSA", "ES256K")
        kid: Key identifier, conventionally ``<did>#<fragment>``
    """
    alg: str
    kid: str

    def to_dict(self) -> Dict[str, Any]:
        return {'alg': self.alg, 'kid': self.kid}

    def to_base64url(self) -> str:
        return object_to_base64url(self.to_dict())

    @property
    def did(self) -> str:
        """The DID portion of the key identifier (before any '#')"""
        return self.kid.split('#', 1)[0]


@dataclass(frozen=True)
class CompactJws:
    """
    The three base64url segments of a compact JWS

    Attributes:
        header: Base64url-encoded protected header
        payload: Base64url-encoded payload; empty for a detached JWS
        signature: Base64url-encoded signature
    """
    header: str
    payload: str
    signature: str

    @classmethod
    def parse(cls, jws: str) -> 'CompactJws':
        """
        Split a compact JWS into its segments.

        Raises:
            ValueError: If ``jws`` does not have exactly three segments
        """
        segments = jws.split(SEGMENT_SEPARATOR)
        if len(segments) != 3:
            raise ValueError(f"Expected 3 segments, got {len(segments)}")
        return cls(*segments)

    @property
    def is_detached(self) -> bool:
        return self.payload == ''

    def decode_header(self) -> Dict[str, Any]:
        """
        Decode the header segment as a JSON object.

        Raises:
            ValueError: If the segment is not base64url JSON object text
        """
        return base64url_to_object(self.header)

    def signing_input(self, payload: Optional[str] = None) -> bytes:
        """
        The bytes covered by the signature: ``header + "." + payload``.

        Args:
            payload: Base64url payload to use instead of the embedded one
                (required for detached signatures)
        """
        effective_payload = self.payload if payload is None else payload
        return f'{self.header}{SEGMENT_SEPARATOR}{effective_payload}'.encode('utf-8')

    def encode(self) -> str:
        return SEGMENT_SEPARATOR.join((self.header, self.payload, self.signature))

    def __str__(self) -> str:
        return self.encode()
