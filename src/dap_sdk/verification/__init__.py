"""
DAP Python SDK - Signature Verification Module

Verifies compact JWS signatures (attached or detached) by resolving the
header's key ID to a public key and checking the signature.
"""

from .verifier import (
    CompactJwsVerifier,
    verify_jws,
)

__all__ = [
    'CompactJwsVerifier',
    'verify_jws',
]
