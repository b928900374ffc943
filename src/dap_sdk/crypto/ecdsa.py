"""
ECDSA keys on secp256k1 (ES256K) and P-256 (ES256)

JWS carries ECDSA signatures as the raw concatenation ``r || s`` with each
integer left-padded to the curve size (RFC 7518 section 3.4). The
cryptography package works with DER, so signatures are converted both ways.
"""

from typing import Dict

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature, encode_dss_signature

from ..exceptions import KeyMaterialError
from .utils import to_base64url, from_base64url

COORDINATE_LENGTH = 32

CURVES = {
    'secp256k1': ec.SECP256K1,
    'P-256': ec.SECP256R1,
}


def _curve_for(crv: str) -> ec.EllipticCurve:
    curve_class = CURVES.get(crv)
    if curve_class is None:
        raise KeyMaterialError(f"Unsupported curve: {crv}", "UNSUPPORTED_CURVE")
    return curve_class()


def generate_private_key(crv: str) -> ec.EllipticCurvePrivateKey:
    """Generate a private key on the named curve ('secp256k1' or 'P-256')."""
    return ec.generate_private_key(_curve_for(crv))


def sign_raw(private_key: ec.EllipticCurvePrivateKey, message: bytes) -> bytes:
    """
    Sign with ECDSA/SHA-256 and return the raw ``r || s`` signature.
    """
    der_signature = private_key.sign(message, ec.ECDSA(hashes.SHA256()))
    r, s = decode_dss_signature(der_signature)
    return r.to_bytes(COORDINATE_LENGTH, 'big') + s.to_bytes(COORDINATE_LENGTH, 'big')


def verify_raw(public_key: ec.EllipticCurvePublicKey, message: bytes, signature: bytes) -> bool:
    """
    Verify a raw ``r || s`` ECDSA/SHA-256 signature.

    Returns:
        bool: True if the signature is valid, False otherwise
    """
    if len(signature) != 2 * COORDINATE_LENGTH:
        return False

    r = int.from_bytes(signature[:COORDINATE_LENGTH], 'big')
    s = int.from_bytes(signature[COORDINATE_LENGTH:], 'big')
    try:
        public_key.verify(encode_dss_signature(r, s), message, ec.ECDSA(hashes.SHA256()))
        return True
    except InvalidSignature:
        return False


def public_key_to_jwk(public_key: ec.EllipticCurvePublicKey) -> Dict[str, str]:
    """Convert an EC public key to an EC JWK."""
    crv = next((name for name, curve in CURVES.items() if isinstance(public_key.curve, curve)), None)
    if crv is None:
        raise KeyMaterialError(f"Unsupported curve: {public_key.curve.name}", "UNSUPPORTED_CURVE")

    numbers = public_key.public_numbers()
    return {
        'kty': 'EC',
        'crv': crv,
        'x': to_base64url(numbers.x.to_bytes(COORDINATE_LENGTH, 'big')),
        'y': to_base64url(numbers.y.to_bytes(COORDINATE_LENGTH, 'big')),
    }


def public_key_from_jwk(jwk: Dict[str, str]) -> ec.EllipticCurvePublicKey:
    """
    Load an EC public key from a JWK.

    Raises:
        KeyMaterialError: If the JWK is not a valid EC public key on a supported curve
    """
    if jwk.get('kty') != 'EC':
        raise KeyMaterialError("JWK is not an EC key", "INVALID_JWK")

    curve = _curve_for(jwk.get('crv'))
    try:
        x = int.from_bytes(from_base64url(jwk.get('x', '')), 'big')
        y = int.from_bytes(from_base64url(jwk.get('y', '')), 'big')
        return ec.EllipticCurvePublicNumbers(x, y, curve).public_key()
    except ValueError as e:
        raise KeyMaterialError(f"Invalid EC JWK: {e}", "INVALID_JWK") from e
