"""
Verification of raw signatures against public JSON Web Keys
"""

from typing import Any, Dict, Tuple

from ..exceptions import KeyMaterialError
from . import ecdsa, ed25519

# JWS "alg" value -> (JWK "kty", JWK "crv")
SUPPORTED_ALGORITHMS: Dict[str, Tuple[str, str]] = {
    'EdDSA': ('OKP', 'Ed25519'),
    'Ed25519': ('OKP', 'Ed25519'),
    'ES256K': ('EC', 'secp256k1'),
    'ES256': ('EC', 'P-256'),
}

_REQUIRED_MEMBERS = {
    'OKP': ('crv', 'x'),
    'EC': ('crv', 'x', 'y'),
}


def is_public_jwk(jwk: Any) -> bool:
    """
    Check that a value is a public (not private) JWK of a supported key type.
    """
    if not isinstance(jwk, dict) or 'd' in jwk:
        return False

    required = _REQUIRED_MEMBERS.get(jwk.get('kty'))
    if required is None:
        return False

    return all(isinstance(jwk.get(member), str) and jwk[member] for member in required)


def verify_with_jwk(jwk: Dict[str, Any], algorithm: str, message: bytes, signature: bytes) -> bool:
    """
    Verify a raw JWS signature with a public JWK.

    Args:
        jwk: Public key as a JWK
        algorithm: JWS ``alg`` value
        message: The JWS signing input bytes
        signature: Raw signature bytes

    Returns:
        bool: True if the signature is valid for the key, False otherwise

    Raises:
        KeyMaterialError: With ``UNSUPPORTED_ALGORITHM`` if the algorithm is
            unsupported or does not fit the key, or ``INVALID_JWK`` if the JWK
            cannot be loaded as a public key
    """
    expected = SUPPORTED_ALGORITHMS.get(algorithm)
    if expected is None:
        raise KeyMaterialError(f'Unsupported algorithm "{algorithm}"', "UNSUPPORTED_ALGORITHM")

    kty, crv = expected
    if jwk.get('kty') != kty or jwk.get('crv') != crv:
        raise KeyMaterialError(
            f'Algorithm "{algorithm}" does not match key type {jwk.get("kty")}/{jwk.get("crv")}',
            "UNSUPPORTED_ALGORITHM"
        )

    try:
        if kty == 'OKP':
            public_key = ed25519.public_key_from_jwk(jwk)
        else:
            public_key = ecdsa.public_key_from_jwk(jwk)
    except KeyMaterialError as e:
        raise KeyMaterialError(f"Unusable public key: {e.message}", "INVALID_JWK", e.details) from e

    if kty == 'OKP':
        return ed25519.verify_signature(public_key, message, signature)

    return ecdsa.verify_raw(public_key, message, signature)

