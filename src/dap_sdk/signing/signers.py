"""
Local signers backed by in-process private keys
"""

from typing import Dict, Optional

from cryptography.hazmat.primitives.asymmetric import ec

from ..crypto import ecdsa
from ..crypto.ed25519 import Ed25519KeyPair, generate_key_pair, sign_message
from ..exceptions import KeyMaterialError

# JWS "alg" value -> curve name for ECDSA signers
ECDSA_ALGORITHMS = {
    'ES256K': 'secp256k1',
    'ES256': 'P-256',
}


class Ed25519Signer:
    """
    Signer producing EdDSA signatures with an Ed25519 key pair

    Attributes:
        algorithm: Always "EdDSA"
        key_id: Key identifier placed in the JWS header
    """

    algorithm = 'EdDSA'

    def __init__(self, key_id: str, key_pair: Optional[Ed25519KeyPair] = None):
        if not key_id:
            raise KeyMaterialError("Key ID cannot be empty", "INVALID_KEY_ID")

        self.key_id = key_id
        self._key_pair = key_pair or generate_key_pair()

    def sign(self, data: bytes) -> bytes:
        return sign_message(self._key_pair.private_key, data)

    def public_jwk(self) -> Dict[str, str]:
        return self._key_pair.public_jwk()

    def __repr__(self) -> str:
        return f"Ed25519Signer(key_id='{self.key_id}')"


class EcdsaSigner:
    """
    Signer producing ES256K or ES256 signatures

    Attributes:
        algorithm: "ES256K" (secp256k1) or "ES256" (P-256)
        key_id: Key identifier placed in the JWS header
    """

    def __init__(self, key_id: str, algorithm: str = 'ES256K',
                 private_key: Optional[ec.EllipticCurvePrivateKey] = None):
        if not key_id:
            raise KeyMaterialError("Key ID cannot be empty", "INVALID_KEY_ID")

        crv = ECDSA_ALGORITHMS.get(algorithm)
        if crv is None:
            raise KeyMaterialError(f'Unsupported algorithm "{algorithm}"', "UNSUPPORTED_ALGORITHM")

        self.key_id = key_id
        self.algorithm = algorithm
        self._private_key = private_key or ecdsa.generate_private_key(crv)

        if ecdsa.public_key_to_jwk(self._private_key.public_key())['crv'] != crv:
            raise KeyMaterialError(f"Private key is not on the {crv} curve", "UNSUPPORTED_CURVE")

    def sign(self, data: bytes) -> bytes:
        return ecdsa.sign_raw(self._private_key, data)

    def public_jwk(self) -> Dict[str, str]:
        return ecdsa.public_key_to_jwk(self._private_key.public_key())

    def __repr__(self) -> str:
        return f"EcdsaSigner(key_id='{self.key_id}', algorithm='{self.algorithm}')"
