"""
Compact JWS signing

Produces compact JSON Web Signatures over arbitrary payload bytes, with an
optional detached payload (RFC 7515 Appendix F). Key custody stays with the
signer; this module only hands it the signing input.
"""

import logging

from ..crypto.utils import to_base64url
from .types import CompactJws, JwsHeader, Signer
from .utils import maybe_await

logger = logging.getLogger(__name__)


async def sign_jws(signer: Signer, payload: bytes, *, detached: bool = False) -> str:
    """
    Sign a payload and produce a compact JWS.

    Args:
        signer: Signer capability providing ``algorithm``, ``key_id`` and ``sign``
        payload: The payload bytes to sign
        detached: If True, the payload segment is left empty in the output

    Returns:
        str: ``header.payload.signature``, or ``header..signature`` when detached
    """
    header = JwsHeader(alg=signer.algorithm, kid=signer.key_id)
    header_b64 = header.to_base64url()
    payload_b64 = to_base64url(payload)

    jws = CompactJws(header_b64, payload_b64, '')
    signature_bytes = await maybe_await(signer.sign(jws.signing_input()))
    signature_b64 = to_base64url(signature_bytes)

    logger.debug(f"Signed {len(payload)} byte payload with key {header.kid} (detached={detached})")

    return CompactJws(header_b64, '' if detached else payload_b64, signature_b64).encode()
