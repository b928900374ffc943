"""
Compact JWS verification engine

Verification of a compact JWS runs these steps, each failing with its own
error code:

1. The JWS is a string with exactly three segments.
2. A detached payload, when supplied, requires an empty payload segment and
   replaces it with base64url(detached payload).
3. The header decodes to a JSON object with non-empty string "alg" and "kid".
4. The key resolver dereferences "kid" to a verification method with a
   public JWK that loads as a key.
5. The signature verifies over ``header + "." + payload`` with that key.

On success the DID part of "kid" is returned as the signer's identity.
"""

import logging
from typing import Any, Optional

from ..crypto.jwk import verify_with_jwk
from ..crypto.utils import to_base64url, from_base64url
from ..exceptions import (
    KeyMaterialError,
    MalformedJwsError,
    UnresolvableKeyError,
    IntegrityError,
    VerificationErrorCodes,
)
from ..resolution.types import KeyResolver, KeyResolutionResult
from ..resolution.resolver import get_default_resolver
from ..signing.types import CompactJws, JwsHeader
from ..signing.utils import maybe_await

logger = logging.getLogger(__name__)


class CompactJwsVerifier:
    """
    Verifies compact JWS signatures against keys from a resolver
    """

    def __init__(self, resolver: Optional[KeyResolver] = None):
        """
        Args:
            resolver: Key resolver (the process-wide default if None)
        """
        self.resolver = resolver or get_default_resolver()

    async def verify(self, jws: Any, detached_payload: Optional[bytes] = None) -> str:
        """
        Verify a compact JWS.

        Args:
            jws: The compact JWS string
            detached_payload: The signed payload, for detached signatures

        Returns:
            str: The DID of the signer

        Raises:
            MalformedJwsError: If the JWS or its header is malformed
            UnresolvableKeyError: If "kid" does not resolve to a public key
            IntegrityError: If the signature does not match
        """
        parsed = self._parse(jws)

        payload_b64 = parsed.payload
        if detached_payload is not None:
            # Ensure that if a detached payload is provided, the JWS payload is empty.
            if not parsed.is_detached:
                raise MalformedJwsError(
                    "Expected detached JWS with empty payload",
                    VerificationErrorCodes.PAYLOAD_NOT_DETACHED
                )
            payload_b64 = to_base64url(detached_payload)

        header = self._decode_header(parsed)

        result = await maybe_await(self.resolver.resolve(header.kid))
        public_key_jwk = result.public_key_jwk if isinstance(result, KeyResolutionResult) else None
        if public_key_jwk is None:
            logger.warning(f"Key ID {header.kid} did not resolve: {getattr(result, 'error', None)}")
            raise UnresolvableKeyError(
                'kid does not dereference to a verification method with a public key '
                '(expected key id ("kid") in JWS header to dereference to a DID Document Verification Method)',
                VerificationErrorCodes.UNRESOLVABLE_KEY,
                {'kid': header.kid, 'error': getattr(result, 'error', None)}
            )

        try:
            signature = from_base64url(parsed.signature)
        except ValueError:
            raise IntegrityError("Integrity mismatch", VerificationErrorCodes.INTEGRITY_MISMATCH,
                                 {'kid': header.kid})

        try:
            is_valid = verify_with_jwk(public_key_jwk, header.alg, parsed.signing_input(payload_b64), signature)
        except KeyMaterialError as e:
            if e.error_code == "INVALID_JWK":
                logger.warning(f"Key ID {header.kid} resolved to an unusable key: {e.message}")
                raise UnresolvableKeyError(
                    'kid does not dereference to a usable public key '
                    '(expected key id ("kid") in JWS header to dereference to a DID Document Verification Method)',
                    VerificationErrorCodes.UNRESOLVABLE_KEY,
                    {'kid': header.kid, 'error': e.message}
                ) from e
            raise MalformedJwsError(
                e.message,
                VerificationErrorCodes.UNSUPPORTED_ALGORITHM,
                {'alg': header.alg, 'kid': header.kid}
            ) from e

        if not is_valid:
            raise IntegrityError("Integrity mismatch", VerificationErrorCodes.INTEGRITY_MISMATCH,
                                 {'kid': header.kid})

        logger.debug(f"Verified JWS signed by {header.kid}")
        return header.did

    @staticmethod
    def _parse(jws: Any) -> CompactJws:
        if not isinstance(jws, str):
            raise MalformedJwsError(
                "Expected Compact JWS in string format",
                VerificationErrorCodes.NOT_A_STRING
            )

        try:
            return CompactJws.parse(jws)
        except ValueError:
            raise MalformedJwsError(
                "Expected Compact JWS with 3 parts",
                VerificationErrorCodes.WRONG_SEGMENT_COUNT
            )

    @staticmethod
    def _decode_header(parsed: CompactJws) -> JwsHeader:
        try:
            header = parsed.decode_header()
        except ValueError:
            raise MalformedJwsError("Invalid JWS header", VerificationErrorCodes.INVALID_HEADER)

        alg = header.get('alg')
        if not alg or not isinstance(alg, str):
            raise MalformedJwsError(
                'Missing or invalid algorithm ("alg") in JWS header',
                VerificationErrorCodes.INVALID_ALGORITHM
            )

        kid = header.get('kid')
        if not kid or not isinstance(kid, str):
            raise MalformedJwsError(
                'Missing or invalid key ID ("kid") in JWS header',
                VerificationErrorCodes.INVALID_KEY_ID
            )

        return JwsHeader(alg=alg, kid=kid)


async def verify_jws(
    jws: Any,
    resolver: Optional[KeyResolver] = None,
    detached_payload: Optional[bytes] = None
) -> str:
    """
    Convenience function to verify a compact JWS.

    Returns:
        str: The DID of the signer
    """
    return await CompactJwsVerifier(resolver).verify(jws, detached_payload)
