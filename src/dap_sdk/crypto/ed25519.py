"""
Ed25519 key generation and signing for DAP Python SDK

This module provides Ed25519 key pair generation, raw signing and
verification using the cryptography package, plus conversion of keys to
JSON Web Keys (RFC 8037).
"""

from typing import Dict, Optional, Union
from dataclasses import dataclass

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey
from cryptography.hazmat.primitives import serialization
from cryptography.exceptions import InvalidSignature

from ..exceptions import KeyMaterialError
from .utils import to_base64url, from_base64url

# Constants for Ed25519 key operations
ED25519_PRIVATE_KEY_LENGTH = 32
ED25519_PUBLIC_KEY_LENGTH = 32
ED25519_SIGNATURE_LENGTH = 64


@dataclass
class Ed25519KeyPair:
    """
    Represents an Ed25519 key pair with private and public keys.

    Attributes:
        private_key: The private key as bytes (32 bytes)
        public_key: The public key as bytes (32 bytes)
    """
    private_key: bytes
    public_key: bytes

    def __post_init__(self):
        """Validate key pair after initialization"""
        if not isinstance(self.private_key, bytes):
            raise KeyMaterialError("Private key must be bytes", "INVALID_PRIVATE_KEY_TYPE")
        if not isinstance(self.public_key, bytes):
            raise KeyMaterialError("Public key must be bytes", "INVALID_PUBLIC_KEY_TYPE")

        if len(self.private_key) != ED25519_PRIVATE_KEY_LENGTH:
            raise KeyMaterialError(
                f"Private key must be exactly {ED25519_PRIVATE_KEY_LENGTH} bytes",
                "INVALID_PRIVATE_KEY_LENGTH"
            )

        if len(self.public_key) != ED25519_PUBLIC_KEY_LENGTH:
            raise KeyMaterialError(
                f"Public key must be exactly {ED25519_PUBLIC_KEY_LENGTH} bytes",
                "INVALID_PUBLIC_KEY_LENGTH"
            )

    def public_jwk(self) -> Dict[str, str]:
        """Public key as an OKP JSON Web Key"""
        return public_key_to_jwk(self.public_key)


def _validate_private_key(private_key: bytes) -> None:
    if not isinstance(private_key, bytes):
        raise KeyMaterialError("Private key must be bytes", "INVALID_PRIVATE_KEY_TYPE")

    if len(private_key) != ED25519_PRIVATE_KEY_LENGTH:
        raise KeyMaterialError(
            f"Private key must be exactly {ED25519_PRIVATE_KEY_LENGTH} bytes",
            "INVALID_PRIVATE_KEY_LENGTH"
        )

    # Check for all-zero key (invalid)
    if private_key == b'\x00' * ED25519_PRIVATE_KEY_LENGTH:
        raise KeyMaterialError("Private key cannot be all zeros", "INVALID_PRIVATE_KEY_VALUE")


def _validate_public_key(public_key: bytes) -> None:
    if not isinstance(public_key, bytes):
        raise KeyMaterialError("Public key must be bytes", "INVALID_PUBLIC_KEY_TYPE")

    if len(public_key) != ED25519_PUBLIC_KEY_LENGTH:
        raise KeyMaterialError(
            f"Public key must be exactly {ED25519_PUBLIC_KEY_LENGTH} bytes",
            "INVALID_PUBLIC_KEY_LENGTH"
        )


def generate_key_pair(*, entropy: Optional[bytes] = None) -> Ed25519KeyPair:
    """
    Generate an Ed25519 key pair using the cryptography package.

    Args:
        entropy: Custom entropy source for testing only (32 bytes)

    Returns:
        Ed25519KeyPair: The generated key pair

    Raises:
        KeyMaterialError: If the entropy is invalid
    """
    if entropy is not None:
        # Use provided entropy (mainly for testing)
        _validate_private_key(entropy)
        private_key_obj = Ed25519PrivateKey.from_private_bytes(entropy)
    else:
        private_key_obj = Ed25519PrivateKey.generate()

    private_key_bytes = private_key_obj.private_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PrivateFormat.Raw,
        encryption_algorithm=serialization.NoEncryption()
    )

    public_key_bytes = private_key_obj.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw
    )

    return Ed25519KeyPair(
        private_key=private_key_bytes,
        public_key=public_key_bytes
    )


def sign_message(private_key: bytes, message: Union[str, bytes]) -> bytes:
    """
    Sign a message using Ed25519 private key.

    Args:
        private_key: Ed25519 private key bytes (32 bytes)
        message: Message to sign (string or bytes)

    Returns:
        bytes: Ed25519 signature (64 bytes)

    Raises:
        KeyMaterialError: If the private key is invalid
    """
    _validate_private_key(private_key)

    # Convert message to bytes if needed
    if isinstance(message, str):
        message_bytes = message.encode('utf-8')
    else:
        message_bytes = message

    private_key_obj = Ed25519PrivateKey.from_private_bytes(private_key)
    return private_key_obj.sign(message_bytes)


def verify_signature(public_key: bytes, message: Union[str, bytes], signature: bytes) -> bool:
    """
    Verify a signature using Ed25519 public key.

    Args:
        public_key: Ed25519 public key bytes (32 bytes)
        message: Original message (string or bytes)
        signature: Signature to verify

    Returns:
        bool: True if signature is valid, False otherwise

    Raises:
        KeyMaterialError: If the public key is invalid
    """
    _validate_public_key(public_key)

    if not isinstance(signature, bytes) or len(signature) != ED25519_SIGNATURE_LENGTH:
        return False

    if isinstance(message, str):
        message_bytes = message.encode('utf-8')
    else:
        message_bytes = message

    try:
        public_key_obj = Ed25519PublicKey.from_public_bytes(public_key)
        public_key_obj.verify(signature, message_bytes)
        return True
    except InvalidSignature:
        return False


def public_key_to_jwk(public_key: bytes) -> Dict[str, str]:
    """
    Convert raw Ed25519 public key bytes to an OKP JWK.

    Raises:
        KeyMaterialError: If the public key is invalid
    """
    _validate_public_key(public_key)
    return {'kty': 'OKP', 'crv': 'Ed25519', 'x': to_base64url(public_key)}


def public_key_from_jwk(jwk: Dict[str, str]) -> bytes:
    """
    Extract raw Ed25519 public key bytes from an OKP JWK.

    Raises:
        KeyMaterialError: If the JWK is not an Ed25519 public key
    """
    if jwk.get('kty') != 'OKP' or jwk.get('crv') != 'Ed25519':
        raise KeyMaterialError("JWK is not an Ed25519 key", "INVALID_JWK")

    try:
        public_key = from_base64url(jwk.get('x', ''))
    except ValueError as e:
        raise KeyMaterialError(f"Invalid JWK 'x' parameter: {e}", "INVALID_JWK") from e

    _validate_public_key(public_key)
    return public_key
