"""
DAP Python SDK - Key Resolution Module

Turns JWS key identifiers into verification methods with public keys:
did:jwk (local), did:web (HTTPS), did:dht (Pkarr gateway), static key maps,
and a universal resolver dispatching by DID method.
"""

from .types import (
    KeyResolver,
    KeyResolutionResult,
    VerificationMethod,
    ResolutionErrors,
    DidUrl,
    parse_did_url,
)

from .did_jwk import (
    DidJwkResolver,
    DidJwk,
    BearerDid,
)

from .did_web import DidWebResolver, did_web_to_url

from .did_dht import DidDhtResolver, encode_dht_identifier, decode_dht_identifier

from .resolver import (
    StaticKeyResolver,
    UniversalResolver,
    create_default_resolver,
    get_default_resolver,
    set_default_resolver,
)

__all__ = [
    # Types
    'KeyResolver',
    'KeyResolutionResult',
    'VerificationMethod',
    'ResolutionErrors',
    'DidUrl',
    'parse_did_url',
    # DID methods
    'DidJwkResolver',
    'DidJwk',
    'BearerDid',
    'DidWebResolver',
    'did_web_to_url',
    'DidDhtResolver',
    'encode_dht_identifier',
    'decode_dht_identifier',
    # Resolvers
    'StaticKeyResolver',
    'UniversalResolver',
    'create_default_resolver',
    'get_default_resolver',
    'set_default_resolver',
]
