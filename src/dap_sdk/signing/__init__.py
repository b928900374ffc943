"""
DAP Python SDK - Signing Module

Compact JWS signing with detached payload support, the signer capability
protocol, and local Ed25519/ECDSA signers.
"""

from .types import (
    Signer,
    JwsHeader,
    CompactJws,
)

from .compact_jws import sign_jws

from .signers import (
    Ed25519Signer,
    EcdsaSigner,
    ECDSA_ALGORITHMS,
)

# Public API exports
__all__ = [
    # Core signing functionality
    'sign_jws',
    # Types
    'Signer',
    'JwsHeader',
    'CompactJws',
    # Signers
    'Ed25519Signer',
    'EcdsaSigner',
    'ECDSA_ALGORITHMS',
]
