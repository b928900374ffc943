"""
did:jwk resolution and local bearer DIDs

A did:jwk embeds its public key: the method-specific identifier is the
base64url-encoded JSON of a public JWK, and the single verification method
is ``<did>#0``. Resolution therefore needs no network access.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict

from ..crypto import ecdsa
from ..crypto.ed25519 import generate_key_pair
from ..crypto.jwk import is_public_jwk
from ..crypto.utils import object_to_base64url, base64url_to_object
from ..exceptions import InvalidIdentifierError, KeyMaterialError
from ..signing.signers import Ed25519Signer, EcdsaSigner, ECDSA_ALGORITHMS
from ..signing.types import Signer
from .types import KeyResolutionResult, ResolutionErrors, VerificationMethod, parse_did_url

logger = logging.getLogger(__name__)

METHOD = 'jwk'
VERIFICATION_METHOD_FRAGMENT = '0'
VERIFICATION_METHOD_TYPE = 'JsonWebKey'


class DidJwkResolver:
    """Resolves ``did:jwk`` key identifiers without network access"""

    def resolve(self, kid: str) -> KeyResolutionResult:
        try:
            did_url = parse_did_url(kid)
        except InvalidIdentifierError as e:
            return KeyResolutionResult.failed(ResolutionErrors.INVALID_DID, str(e))

        if did_url.method != METHOD:
            return KeyResolutionResult.failed(
                ResolutionErrors.METHOD_NOT_SUPPORTED,
                f"Method not supported: {did_url.method}"
            )

        try:
            jwk = base64url_to_object(did_url.id)
        except ValueError as e:
            return KeyResolutionResult.failed(ResolutionErrors.INVALID_DID, f"Invalid did:jwk: {e}")

        if not is_public_jwk(jwk):
            return KeyResolutionResult.failed(ResolutionErrors.INVALID_PUBLIC_KEY, "did:jwk does not hold a public JWK")

        if did_url.fragment != VERIFICATION_METHOD_FRAGMENT:
            logger.debug(f"No verification method #{did_url.fragment} in {did_url.did}")
            return KeyResolutionResult.failed(
                ResolutionErrors.NOT_FOUND,
                f"did:jwk only has verification method #{VERIFICATION_METHOD_FRAGMENT}"
            )

        return KeyResolutionResult.found(VerificationMethod(
            id=f'{did_url.did}#{VERIFICATION_METHOD_FRAGMENT}',
            type=VERIFICATION_METHOD_TYPE,
            controller=did_url.did,
            public_key_jwk=jwk,
        ))


@dataclass
class BearerDid:
    """
    A DID together with a signer for one of its verification methods

    Attributes:
        uri: The DID
        signer: Signer whose ``key_id`` is a verification method of ``uri``
    """
    uri: str
    signer: Signer

    def get_signer(self) -> Signer:
        return self.signer


class DidJwk:
    """Creates did:jwk identities backed by freshly generated keys"""

    @staticmethod
    def uri_for(public_jwk: Dict[str, Any]) -> str:
        """The did:jwk URI embedding ``public_jwk``"""
        if not is_public_jwk(public_jwk):
            raise KeyMaterialError("did:jwk requires a public JWK", "INVALID_JWK")
        return f'did:{METHOD}:{object_to_base64url(public_jwk)}'

    @classmethod
    def create(cls, algorithm: str = 'EdDSA') -> BearerDid:
        """
        Generate a key and return the matching did:jwk as a bearer DID.

        Args:
            algorithm: "EdDSA" (Ed25519), "ES256K" (secp256k1) or "ES256" (P-256)

        Raises:
            KeyMaterialError: If the algorithm is unsupported
        """
        if algorithm in ('EdDSA', 'Ed25519'):
            key_pair = generate_key_pair()
            uri = cls.uri_for(key_pair.public_jwk())
            signer = Ed25519Signer(f'{uri}#{VERIFICATION_METHOD_FRAGMENT}', key_pair)
        elif algorithm in ECDSA_ALGORITHMS:
            private_key = ecdsa.generate_private_key(ECDSA_ALGORITHMS[algorithm])
            uri = cls.uri_for(ecdsa.public_key_to_jwk(private_key.public_key()))
            signer = EcdsaSigner(f'{uri}#{VERIFICATION_METHOD_FRAGMENT}', algorithm, private_key)
        else:
            raise KeyMaterialError(f'Unsupported algorithm "{algorithm}"', "UNSUPPORTED_ALGORITHM")

        return BearerDid(uri=uri, signer=signer)
