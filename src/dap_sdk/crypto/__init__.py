"""
Cryptographic functionality for DAP Python SDK

This module provides canonical digests, Ed25519 and ECDSA key handling, and
signature verification against JSON Web Keys.
"""

from .digest import canonicalize, digest, DIGEST_LENGTH
from .ed25519 import (
    Ed25519KeyPair,
    generate_key_pair,
    sign_message,
    verify_signature,
)
from .jwk import is_public_jwk, verify_with_jwk, SUPPORTED_ALGORITHMS
from .utils import to_base64url, from_base64url

__all__ = [
    'canonicalize',
    'digest',
    'DIGEST_LENGTH',
    'Ed25519KeyPair',
    'generate_key_pair',
    'sign_message',
    'verify_signature',
    'is_public_jwk',
    'verify_with_jwk',
    'SUPPORTED_ALGORITHMS',
    'to_base64url',
    'from_base64url',
]
