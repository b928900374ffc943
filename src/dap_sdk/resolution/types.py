"""
Type definitions for key resolution

A key resolver turns a key identifier (``kid``, usually a DID URL such as
``did:jwk:...#0``) into the verification method that holds its public key.
"""

import re
from typing import Any, Awaitable, Dict, Optional, Protocol, Union, runtime_checkable
from dataclasses import dataclass

from ..exceptions import InvalidIdentifierError, IdentifierErrorCodes
from ..crypto.jwk import is_public_jwk

DID_URL_PATTERN = re.compile(
    r'did:(?P<method>[a-z0-9]+):(?P<id>(?:[a-zA-Z0-9._%-]*:)*[a-zA-Z0-9._%-]+)'
    r'(?P<path>/[^?#]*)?(?:\?(?P<query>[^#]*))?(?:#(?P<fragment>.*))?'
)


class ResolutionErrors:
    """Error values carried by unsuccessful resolution results"""

    INVALID_DID = "invalidDid"
    METHOD_NOT_SUPPORTED = "methodNotSupported"
    NOT_FOUND = "notFound"
    INVALID_PUBLIC_KEY = "invalidPublicKey"
    INVALID_DID_DOCUMENT = "invalidDidDocument"


@dataclass(frozen=True)
class DidUrl:
    """
    A parsed DID URL

    Attributes:
        did: The bare DID, ``did:<method>:<id>``
        method: DID method name
        id: Method-specific identifier
        fragment: Fragment after '#', if any
    """
    did: str
    method: str
    id: str
    fragment: Optional[str] = None


def parse_did_url(did_url: str) -> DidUrl:
    """
    Parse a DID or DID URL.

    Raises:
        InvalidIdentifierError: If ``did_url`` is not a DID URL
    """
    match = DID_URL_PATTERN.fullmatch(did_url) if isinstance(did_url, str) else None
    if not match:
        raise InvalidIdentifierError(f"Invalid DID URL: {did_url!r}", IdentifierErrorCodes.INVALID_CHARACTER)

    method = match.group('method')
    method_id = match.group('id')
    return DidUrl(
        did=f'did:{method}:{method_id}',
        method=method,
        id=method_id,
        fragment=match.group('fragment'),
    )


@dataclass(frozen=True)
class VerificationMethod:
    """
    A DID document verification method

    Attributes:
        id: Absolute DID URL of the method
        type: Verification method type (e.g. "JsonWebKey2020")
        controller: DID controlling the key
        public_key_jwk: Public key as a JWK, if the method carries one
    """
    id: str
    type: str
    controller: str
    public_key_jwk: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], did: str) -> 'VerificationMethod':
        """
        Build from a DID document entry, resolving relative ids against ``did``

        Members of the wrong type are dropped; ``publicKeyJwk`` must be an object.

        Raises:
            ValueError: If the entry has no string ``id``
        """
        method_id = data.get('id')
        if not isinstance(method_id, str) or not method_id:
            raise ValueError("Verification method id must be a non-empty string")
        if method_id.startswith('#'):
            method_id = did + method_id

        method_type = data.get('type')
        controller = data.get('controller')
        public_key_jwk = data.get('publicKeyJwk')
        return cls(
            id=method_id,
            type=method_type if isinstance(method_type, str) else '',
            controller=controller if isinstance(controller, str) else did,
            public_key_jwk=public_key_jwk if isinstance(public_key_jwk, dict) else None,
        )

    @property
    def has_public_key(self) -> bool:
        return is_public_jwk(self.public_key_jwk)


@dataclass(frozen=True)
class KeyResolutionResult:
    """
    Outcome of resolving a key identifier

    Exactly one of ``verification_method`` and ``error`` is set.
    """
    verification_method: Optional[VerificationMethod] = None
    error: Optional[str] = None
    error_message: Optional[str] = None

    @classmethod
    def found(cls, verification_method: VerificationMethod) -> 'KeyResolutionResult':
        return cls(verification_method=verification_method)

    @classmethod
    def failed(cls, error: str, message: Optional[str] = None) -> 'KeyResolutionResult':
        return cls(error=error, error_message=message)

    @property
    def public_key_jwk(self) -> Optional[Dict[str, Any]]:
        """The usable public JWK, or None if resolution did not yield one"""
        if self.verification_method is None or not self.verification_method.has_public_key:
            return None
        return self.verification_method.public_key_jwk


@runtime_checkable
class KeyResolver(Protocol):
    """Protocol for key resolver implementations"""

    def resolve(self, kid: str) -> Union[KeyResolutionResult, Awaitable[KeyResolutionResult]]:
        """Resolve a key identifier to its verification method"""
        ...
