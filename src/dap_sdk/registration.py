"""
DAP registrations

A registration binds a DAP (handle + domain) to a DID. It is made
tamper-evident by a detached compact JWS, produced by the DID's key, over the
canonical digest of ``{id, handle, did, domain}``.
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from .crypto.digest import digest
from .exceptions import InvalidDapError, InvalidRegistrationError, RegistrationParseError, RegistrationErrorCodes
from .identifiers import Dap, RegistrationId
from .resolution.did_jwk import BearerDid
from .resolution.types import KeyResolver
from .signing.compact_jws import sign_jws
from .signing.types import Signer
from .verification.verifier import verify_jws

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('id', 'handle', 'did', 'domain')


@dataclass
class DapRegistration:
    """
    A DAP registration record.

    Prefer :meth:`create` and :meth:`parse` over the constructor: ``create``
    allocates a fresh ID and validates, ``parse`` verifies the signature.

    Attributes:
        id: Unique, time-ordered registration ID
        handle: The DAP handle
        did: DID of the registrant, which must also be the signer
        domain: The DAP domain
        signature: Detached compact JWS over the registration digest
    """
    id: RegistrationId
    handle: str
    did: str
    domain: str
    signature: Optional[str] = None

    @classmethod
    def create(cls, handle: str, did: str, domain: str) -> 'DapRegistration':
        """
        Create a new unsigned registration.

        Raises:
            InvalidRegistrationError: If the fields fail validation
        """
        registration = cls(RegistrationId.create(), handle, did, domain)
        registration.validate()

        logger.debug(f"Created registration {registration.id} for {registration.did}")
        return registration

    @classmethod
    async def parse(
        cls,
        raw: Union[Mapping, str],
        resolver: Optional[KeyResolver] = None
    ) -> 'DapRegistration':
        """
        Parse a registration and verify its signature.

        Args:
            raw: The registration as a mapping or JSON string
            resolver: Key resolver for verification (default resolver if None)

        Returns:
            DapRegistration: The verified registration

        Raises:
            RegistrationParseError: If ``raw`` cannot be parsed
            InvalidRegistrationError: If the record is unsigned
                or signed by a different DID
            InvalidRegistrationIdError: If the ID is malformed
            InvalidJwsError: If the signature fails verification
        """
        fields = _raw_to_fields(raw)

        registration = cls(
            RegistrationId.parse(fields['id']),
            fields['handle'],
            fields['did'],
            fields['domain'],
            fields.get('signature'),
        )

        await registration.verify(resolver)
        return registration

    @property
    def dap(self) -> Dap:
        return Dap(self.handle, self.domain)

    def compute_digest(self) -> bytes:
        """
        Compute the digest covered by the signature.

        The payload is ``{id, handle, did, domain}`` with the ID in its string
        form; see :func:`dap_sdk.crypto.digest.digest`.

        Returns:
            bytes: The 32-byte SHA-256 digest
        """
        payload = {
            'id': str(self.id),
            'handle': self.handle,
            'did': self.did,
            'domain': self.domain,
        }
        return digest(payload)

    async def sign(self, signer: Union[Signer, BearerDid]) -> None:
        """
        Sign the registration with a detached compact JWS.

        Args:
            signer: A signer, or a bearer DID whose signer is used
        """
        if isinstance(signer, BearerDid):
            signer = signer.get_signer()

        payload = self.compute_digest()
        self.signature = await sign_jws(signer, payload, detached=True)

        logger.debug(f"Signed registration {self.id} with key {signer.key_id}")

    def validate(self) -> None:
        """
        Validate the registration fields.

        Raises:
            InvalidRegistrationError: If a field is not a non-empty string or
                the handle and domain do not form a valid DAP
        """
        for name in ('handle', 'did', 'domain'):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise InvalidRegistrationError(
                    f"{name} must be a non-empty string",
                    RegistrationErrorCodes.INVALID_FIELD,
                    {'field': name}
                )

        try:
            Dap.parse(str(self.dap))
        except InvalidDapError as e:
            raise InvalidRegistrationError(
                f"handle and domain do not form a valid DAP: {e.message}",
                RegistrationErrorCodes.INVALID_FIELD,
                {'field': 'handle', 'rule': e.error_code}
            ) from e

    async def verify(self, resolver: Optional[KeyResolver] = None) -> str:
        """
        Verify the signature and that it was produced by ``did``.

        Args:
            resolver: Key resolver (default resolver if None)

        Returns:
            str: The signer's DID

        Raises:
            InvalidRegistrationError: If unsigned or signed by another DID
            InvalidJwsError: If the signature fails verification
        """
        if self.signature is None:
            raise InvalidRegistrationError("Signature is missing", RegistrationErrorCodes.SIGNATURE_MISSING)

        payload = self.compute_digest()
        signer_did = await verify_jws(self.signature, resolver, detached_payload=payload)

        # Ensure that the DID that signed the payload matches the DID in the registration.
        if signer_did != self.did:
            raise InvalidRegistrationError(
                "signature does not match declared identity "
                "(expected registration to be signed by the specified DID)",
                RegistrationErrorCodes.DID_MISMATCH,
                {'did': self.did, 'signer_did': signer_did}
            )

        return signer_did

    def to_dict(self) -> Dict[str, Any]:
        """The persisted shape: id, handle, did, domain, signature (when set)."""
        data: Dict[str, Any] = {
            'id': str(self.id),
            'handle': self.handle,
            'did': self.did,
            'domain': self.domain,
        }
        if self.signature is not None:
            data['signature'] = self.signature
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(',', ':'), ensure_ascii=False)


def _raw_to_fields(raw: Union[Mapping, str]) -> Mapping:
    try:
        fields = json.loads(raw) if isinstance(raw, str) else raw
    except json.JSONDecodeError as e:
        raise RegistrationParseError(str(e), RegistrationErrorCodes.PARSE_FAILURE) from e
    except RecursionError as e:
        raise RegistrationParseError("input is nested too deeply", RegistrationErrorCodes.PARSE_FAILURE) from e

    if not isinstance(fields, Mapping):
        raise RegistrationParseError(
            f"expected an object, got {type(fields).__name__}",
            RegistrationErrorCodes.PARSE_FAILURE
        )

    for name in REQUIRED_FIELDS:
        if not isinstance(fields.get(name), str):
            raise RegistrationParseError(
                f"field '{name}' must be a string",
                RegistrationErrorCodes.PARSE_FAILURE,
                {'field': name}
            )

    signature = fields.get('signature')
    if signature is not None and not isinstance(signature, str):
        raise RegistrationParseError(
            "field 'signature' must be a string",
            RegistrationErrorCodes.PARSE_FAILURE,
            {'field': 'signature'}
        )

    return fields

