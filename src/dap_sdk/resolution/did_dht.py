"""
did:dht resolution through a Pkarr relay gateway

A ``did:dht`` identifier is the z-base-32 encoding of an Ed25519 public key,
the identity key. The DID document is published as a DNS packet inside a
BEP 44 mutable item signed by that key. A gateway serves the item at
``<gateway>/<identifier>`` as::

    signature (64 bytes) || sequence number (8 bytes, big-endian) || DNS packet

The signature covers the bencoded ``3:seqi<seq>e1:v<length>:<packet>``.

Inside the packet the root TXT record ``_did.<identifier>.`` lists the
verification methods (``vm=k0,k1``), and each ``_k<N>._did.`` TXT record
describes one key as ``id=<fragment>;t=<key type>;k=<base64url key>``.
"""

import asyncio
import logging
from typing import Dict, List, Optional

import dns.exception
import dns.message
import dns.rdatatype
import requests
from cryptography.hazmat.primitives.asymmetric import ec

from ..config.sdk_config import DEFAULT_DHT_GATEWAY_URL
from ..crypto import ecdsa, ed25519
from ..crypto.utils import from_base64url
from ..exceptions import InvalidIdentifierError, KeyMaterialError
from .types import DidUrl, KeyResolutionResult, ResolutionErrors, VerificationMethod, parse_did_url

logger = logging.getLogger(__name__)

METHOD = 'dht'
VERIFICATION_METHOD_TYPE = 'JsonWebKey'

ZBASE32_ALPHABET = 'ybndrfg8ejkmcpqxot1uwisza345h769'
_ZBASE32_DECODE_MAP = {char: index for index, char in enumerate(ZBASE32_ALPHABET)}
IDENTIFIER_LENGTH = 52
_IDENTIFIER_PADDING_BITS = IDENTIFIER_LENGTH * 5 - ed25519.ED25519_PUBLIC_KEY_LENGTH * 8

SIGNATURE_LENGTH = 64
SEQUENCE_LENGTH = 8

ROOT_LABEL = b'_did'

# "t" value in a key record -> key type
KEY_TYPES = {
    '0': 'Ed25519',
    '1': 'secp256k1',
    '2': 'P-256',
}


def encode_dht_identifier(public_key: bytes) -> str:
    """
    z-base-32 encode an Ed25519 identity key as a did:dht identifier.

    Raises:
        KeyMaterialError: If ``public_key`` is not 32 bytes
    """
    if not isinstance(public_key, bytes) or len(public_key) != ed25519.ED25519_PUBLIC_KEY_LENGTH:
        raise KeyMaterialError(
            f"Identity key must be exactly {ed25519.ED25519_PUBLIC_KEY_LENGTH} bytes",
            "INVALID_PUBLIC_KEY_LENGTH"
        )

    number = int.from_bytes(public_key, 'big') << _IDENTIFIER_PADDING_BITS
    chars = []
    for _ in range(IDENTIFIER_LENGTH):
        chars.append(ZBASE32_ALPHABET[number & 0x1F])
        number >>= 5
    return ''.join(reversed(chars))


def decode_dht_identifier(identifier: str) -> bytes:
    """
    Decode a did:dht identifier into the 32-byte identity key.

    Raises:
        ValueError: If the identifier is not 52 z-base-32 characters
    """
    if len(identifier) != IDENTIFIER_LENGTH:
        raise ValueError(f"did:dht identifier must be {IDENTIFIER_LENGTH} characters, got {len(identifier)}")

    number = 0
    for char in identifier:
        index = _ZBASE32_DECODE_MAP.get(char)
        if index is None:
            raise ValueError(f"Invalid z-base-32 character: {char!r}")
        number = (number << 5) | index

    return (number >> _IDENTIFIER_PADDING_BITS).to_bytes(ed25519.ED25519_PUBLIC_KEY_LENGTH, 'big')


def signable_bytes(sequence: int, packet: bytes) -> bytes:
    """The bencoded BEP 44 value covered by the record signature."""
    return b'3:seqi%de1:v%d:' % (sequence, len(packet)) + packet


def read_signed_packet(body: bytes, identity_key: bytes) -> bytes:
    """
    Check a gateway response against the identity key and return its DNS packet.

    Raises:
        ValueError: If the body is truncated or its signature does not verify
    """
    header_length = SIGNATURE_LENGTH + SEQUENCE_LENGTH
    if len(body) <= header_length:
        raise ValueError("Signed record is too short")

    signature = body[:SIGNATURE_LENGTH]
    sequence = int.from_bytes(body[SIGNATURE_LENGTH:header_length], 'big')
    packet = body[header_length:]

    if not ed25519.verify_signature(identity_key, signable_bytes(sequence, packet), signature):
        raise ValueError("Signed record does not verify against the identity key")

    return packet


def _txt_properties(text: str) -> Dict[str, str]:
    properties = {}
    for item in text.split(';'):
        name, separator, value = item.partition('=')
        if separator:
            properties[name.strip()] = value.strip()
    return properties


def _public_key_jwk(key_type: str, key: bytes) -> Dict[str, str]:
    if key_type == 'Ed25519':
        return ed25519.public_key_to_jwk(key)

    # EC keys are published as compressed points
    try:
        public_key = ec.EllipticCurvePublicKey.from_encoded_point(ecdsa.CURVES[key_type](), key)
    except ValueError as e:
        raise KeyMaterialError(f"Invalid {key_type} public key: {e}", "INVALID_JWK") from e
    return ecdsa.public_key_to_jwk(public_key)


def read_verification_methods(packet: bytes, did: str) -> List[VerificationMethod]:
    """
    Decode the verification methods published in a did:dht DNS packet.

    Key records that are missing, of an unknown type or hold unusable key
    material are left out.

    Raises:
        ValueError: If the packet is not DNS wire format or has no root record
    """
    try:
        message = dns.message.from_wire(packet)
    except (dns.exception.DNSException, ValueError) as e:
        raise ValueError(f"Invalid DNS packet: {e}") from e

    root: Optional[Dict[str, str]] = None
    key_records: Dict[str, Dict[str, str]] = {}
    for rrset in message.answer:
        if rrset.rdtype != dns.rdatatype.TXT:
            continue

        labels = rrset.name.labels
        for rdata in rrset:
            properties = _txt_properties(b''.join(rdata.strings).decode('utf-8', 'replace'))
            if labels[0] == ROOT_LABEL:
                root = properties
            elif len(labels) > 1 and labels[1] == ROOT_LABEL and labels[0].startswith(b'_'):
                key_records[labels[0][1:].decode('ascii', 'replace')] = properties

    if root is None:
        raise ValueError("DNS packet has no _did root record")

    methods = []
    for name in filter(None, root.get('vm', '').split(',')):
        record = key_records.get(name)
        key_type = KEY_TYPES.get(record.get('t', '')) if record else None
        if key_type is None or not record.get('id'):
            logger.debug(f"Skipping key record {name} in {did}")
            continue

        try:
            jwk = _public_key_jwk(key_type, from_base64url(record.get('k', '')))
        except (ValueError, KeyMaterialError) as e:
            logger.debug(f"Skipping unusable key {name} in {did}: {e}")
            continue

        methods.append(VerificationMethod(
            id=f"{did}#{record['id']}",
            type=VERIFICATION_METHOD_TYPE,
            controller=did,
            public_key_jwk=jwk,
        ))

    return methods


class DidDhtResolver:
    """
    Resolves ``did:dht`` key identifiers through a Pkarr relay gateway

    Records are only accepted when signed by the identity key in the DID.
    Network and record errors are reported as unsuccessful results rather
    than raised.
    """

    def __init__(self, gateway_url: str = DEFAULT_DHT_GATEWAY_URL, timeout: float = 10.0,
                 verify_ssl: bool = True, session: Optional[requests.Session] = None):
        """
        Args:
            gateway_url: Base URL of the Pkarr relay gateway
            timeout: Request timeout in seconds
            verify_ssl: Verify TLS certificates
            session: Optional session to reuse (a new one is created otherwise)
        """
        self.gateway_url = gateway_url.rstrip('/')
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.session = session or requests.Session()

    async def resolve(self, kid: str) -> KeyResolutionResult:
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
            identity_key = decode_dht_identifier(did_url.id)
        except ValueError as e:
            return KeyResolutionResult.failed(ResolutionErrors.INVALID_DID, f"Invalid did:dht: {e}")

        loop = asyncio.get_running_loop()
        body = await loop.run_in_executor(None, self._fetch_record, did_url)
        if body is None:
            return KeyResolutionResult.failed(ResolutionErrors.NOT_FOUND, f"DID record not found for {did_url.did}")

        try:
            packet = read_signed_packet(body, identity_key)
            methods = read_verification_methods(packet, did_url.did)
        except ValueError as e:
            logger.warning(f"Rejected did:dht record for {did_url.did}: {e}")
            return KeyResolutionResult.failed(ResolutionErrors.INVALID_DID_DOCUMENT, str(e))

        target = f'{did_url.did}#{did_url.fragment}'
        for method in methods:
            if method.id == target:
                return KeyResolutionResult.found(method)

        return KeyResolutionResult.failed(ResolutionErrors.NOT_FOUND, f"No verification method {target}")

    def _fetch_record(self, did_url: DidUrl) -> Optional[bytes]:
        url = f'{self.gateway_url}/{did_url.id}'
        logger.debug(f"Fetching did:dht record from {url}")

        try:
            response = self.session.get(url, timeout=self.timeout, verify=self.verify_ssl)
        except requests.exceptions.RequestException as e:
            logger.warning(f"did:dht resolution failed for {did_url.did}: {e}")
            return None

        if not response.ok:
            logger.warning(f"did:dht resolution failed for {did_url.did}: HTTP {response.status_code}")
            return None

        return response.content
