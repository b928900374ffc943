"""
Tests for DAP registrations
"""

import json
import pytest

from dap_sdk.crypto.digest import digest
from dap_sdk.exceptions import (
    InvalidJwsError,
    InvalidRegistrationError,
    InvalidRegistrationIdError,
    RegistrationParseError,
    IntegrityError,
    RegistrationErrorCodes,
)
from dap_sdk.identifiers import Dap, RegistrationId
from dap_sdk.registration import DapRegistration
from dap_sdk.resolution import DidJwk, StaticKeyResolver, set_default_resolver
from dap_sdk.signing import Ed25519Signer

HANDLE = 'moegrammer'
DOMAIN = 'didpay.me'


@pytest.fixture(autouse=True)
def reset_default_resolver():
    set_default_resolver(None)
    yield
    set_default_resolver(None)


@pytest.fixture
def bearer_did():
    return DidJwk.create()


class TestCreate:
    """Test cases for creating registrations"""

    def test_create(self, bearer_did):
        """Test that create fills in a fresh ID and no signature"""
        registration = DapRegistration.create(HANDLE, bearer_did.uri, DOMAIN)

        assert isinstance(registration.id, RegistrationId)
        assert registration.handle == HANDLE
        assert registration.did == bearer_did.uri
        assert registration.domain == DOMAIN
        assert registration.signature is None
        assert registration.dap == Dap(HANDLE, DOMAIN)
        assert str(registration.dap) == '@moegrammer/didpay.me'

    def test_create_unique(self, bearer_did):
        """Test that identical inputs give distinct records"""
        first = DapRegistration.create(HANDLE, bearer_did.uri, DOMAIN)
        second = DapRegistration.create(HANDLE, bearer_did.uri, DOMAIN)

        assert first.id != second.id
        assert first != second

    @pytest.mark.parametrize('handle,did,domain', [
        ('', 'did:example:1', DOMAIN),
        (HANDLE, '', DOMAIN),
        (HANDLE, 'did:example:1', ''),
        (None, 'did:example:1', DOMAIN),
        ('moe/grammer', 'did:example:1', DOMAIN),
        (HANDLE, 'did:example:1', 'didpay@me'),
    ])
    def test_create_invalid_fields(self, handle, did, domain):
        """Test that create validates its fields"""
        with pytest.raises(InvalidRegistrationError, match="Invalid DAP Registration") as exc_info:
            DapRegistration.create(handle, did, domain)
        assert exc_info.value.error_code == RegistrationErrorCodes.INVALID_FIELD


class TestDigest:
    """Test cases for the registration digest"""

    def test_digest_covers_fields(self, bearer_did):
        """Test the digest is computed over id, handle, did and domain"""
        registration = DapRegistration.create(HANDLE, bearer_did.uri, DOMAIN)
        expected = digest({
            'domain': DOMAIN,
            'did': bearer_did.uri,
            'handle': HANDLE,
            'id': str(registration.id),
        })

        assert registration.compute_digest() == expected

    @pytest.mark.asyncio
    async def test_digest_ignores_signature(self, bearer_did):
        """Test that signing does not change the digest"""
        registration = DapRegistration.create(HANDLE, bearer_did.uri, DOMAIN)
        before = registration.compute_digest()

        await registration.sign(bearer_did)

        assert registration.compute_digest() == before


class TestSignAndVerify:
    """Test cases for signing and verifying registrations"""

    @pytest.mark.asyncio
    async def test_sign_produces_detached_jws(self, bearer_did):
        """Test that the signature is a detached compact JWS"""
        registration = DapRegistration.create(HANDLE, bearer_did.uri, DOMAIN)

        await registration.sign(bearer_did)

        header, payload, signature = registration.signature.split('.')
        assert header and signature
        assert payload == ''

    @pytest.mark.asyncio
    async def test_verify(self, bearer_did):
        """Test verifying a signed registration"""
        registration = DapRegistration.create(HANDLE, bearer_did.uri, DOMAIN)
        await registration.sign(bearer_did)

        assert await registration.verify() == bearer_did.uri

    @pytest.mark.asyncio
    async def test_sign_with_signer(self, bearer_did):
        """Test that a plain signer can be passed instead of a bearer DID"""
        registration = DapRegistration.create(HANDLE, bearer_did.uri, DOMAIN)
        await registration.sign(bearer_did.get_signer())

        assert await registration.verify() == bearer_did.uri

    @pytest.mark.asyncio
    async def test_verify_unsigned(self, bearer_did):
        """Test that an unsigned registration fails verification"""
        registration = DapRegistration.create(HANDLE, bearer_did.uri, DOMAIN)

        with pytest.raises(InvalidRegistrationError, match="Signature is missing") as exc_info:
            await registration.verify()
        assert exc_info.value.error_code == RegistrationErrorCodes.SIGNATURE_MISSING

    @pytest.mark.asyncio
    async def test_signed_by_other_did(self, bearer_did):
        """Test that a signature by another DID is rejected"""
        other = DidJwk.create()
        registration = DapRegistration.create(HANDLE, bearer_did.uri, DOMAIN)
        await registration.sign(other)

        with pytest.raises(InvalidRegistrationError, match="does not match declared identity") as exc_info:
            await registration.verify()
        assert exc_info.value.error_code == RegistrationErrorCodes.DID_MISMATCH

    @pytest.mark.asyncio
    async def test_verify_with_injected_resolver(self):
        """Test verifying against an injected resolver"""
        did = 'did:example:alice'
        signer = Ed25519Signer(f'{did}#key-1')
        resolver = StaticKeyResolver({signer.key_id: signer.public_jwk()})

        registration = DapRegistration.create(HANDLE, did, DOMAIN)
        await registration.sign(signer)

        assert await registration.verify(resolver) == did

    @pytest.mark.asyncio
    @pytest.mark.parametrize('field', ['handle', 'domain', 'did'])
    async def test_tampered_field(self, bearer_did, field):
        """Test that changing a signed field fails verification"""
        registration = DapRegistration.create(HANDLE, bearer_did.uri, DOMAIN)
        await registration.sign(bearer_did)

        setattr(registration, field, getattr(registration, field) + 'x')

        with pytest.raises(IntegrityError):
            await registration.verify()

    @pytest.mark.asyncio
    async def test_tampered_id(self, bearer_did):
        """Test that changing the ID fails verification"""
        registration = DapRegistration.create(HANDLE, bearer_did.uri, DOMAIN)
        await registration.sign(bearer_did)

        registration.id = RegistrationId.create()

        with pytest.raises(IntegrityError):
            await registration.verify()


class TestSerialization:
    """Test cases for the persisted shape"""

    @pytest.mark.asyncio
    async def test_to_dict(self, bearer_did):
        """Test the dict form and its field order"""
        registration = DapRegistration.create(HANDLE, bearer_did.uri, DOMAIN)
        await registration.sign(bearer_did)

        data = registration.to_dict()

        assert list(data) == ['id', 'handle', 'did', 'domain', 'signature']
        assert data['id'] == str(registration.id)
        assert data['signature'] == registration.signature

    def test_to_dict_unsigned(self, bearer_did):
        """Test that an unsigned record omits the signature"""
        registration = DapRegistration.create(HANDLE, bearer_did.uri, DOMAIN)

        assert 'signature' not in registration.to_dict()

    @pytest.mark.asyncio
    async def test_to_json(self, bearer_did):
        """Test the JSON form"""
        registration = DapRegistration.create(HANDLE, bearer_did.uri, DOMAIN)
        await registration.sign(bearer_did)

        raw = registration.to_json()

        assert json.loads(raw) == registration.to_dict()
        assert ' ' not in raw


class TestParse:
    """Test cases for parsing registrations"""

    @pytest.mark.asyncio
    async def test_round_trip(self, bearer_did):
        """Test create, sign, serialize, parse"""
        registration = DapRegistration.create(HANDLE, bearer_did.uri, DOMAIN)
        await registration.sign(bearer_did)

        parsed = await DapRegistration.parse(registration.to_json())

        assert parsed == registration
        assert parsed.to_dict() == registration.to_dict()
        assert parsed.id.extract_timestamp() == registration.id.extract_timestamp()

    @pytest.mark.asyncio
    async def test_parse_mapping(self, bearer_did):
        """Test parsing an already-decoded mapping"""
        registration = DapRegistration.create(HANDLE, bearer_did.uri, DOMAIN)
        await registration.sign(bearer_did)

        parsed = await DapRegistration.parse(registration.to_dict())

        assert parsed == registration

    @pytest.mark.asyncio
    @pytest.mark.parametrize('algorithm', ['ES256K', 'ES256'])
    async def test_round_trip_ecdsa(self, algorithm):
        """Test the round trip with ECDSA did:jwk identities"""
        bearer_did = DidJwk.create(algorithm)
        registration = DapRegistration.create(HANDLE, bearer_did.uri, DOMAIN)
        await registration.sign(bearer_did)

        assert await DapRegistration.parse(registration.to_json()) == registration

    @pytest.mark.asyncio
    async def test_parse_tampered_did(self, bearer_did):
        """Test that a record claiming another DID is rejected"""
        registration = DapRegistration.create(HANDLE, bearer_did.uri, DOMAIN)
        await registration.sign(bearer_did)

        data = registration.to_dict()
        data['did'] = DidJwk.create().uri

        with pytest.raises((InvalidRegistrationError, InvalidJwsError)):
            await DapRegistration.parse(data)

    @pytest.mark.asyncio
    async def test_parse_resigned_by_other_did(self, bearer_did):
        """Test that a record validly signed by a different DID is rejected"""
        registration = DapRegistration.create(HANDLE, bearer_did.uri, DOMAIN)
        await registration.sign(DidJwk.create())

        with pytest.raises(InvalidRegistrationError) as exc_info:
            await DapRegistration.parse(registration.to_json())
        assert exc_info.value.error_code == RegistrationErrorCodes.DID_MISMATCH

    @pytest.mark.asyncio
    async def test_parse_unsigned(self, bearer_did):
        """Test that unsigned records never parse"""
        registration = DapRegistration.create(HANDLE, bearer_did.uri, DOMAIN)

        with pytest.raises(InvalidRegistrationError, match="Signature is missing"):
            await DapRegistration.parse(registration.to_json())

    @pytest.mark.asyncio
    @pytest.mark.parametrize('raw', [
        'not json',
        '[]',
        '"string"',
        '{}',
        '{"id": "reg_x", "handle": "h", "did": "d"}',
        '{"id": 1, "handle": "h", "did": "d", "domain": "x"}',
        '{"id": "reg_x", "handle": "h", "did": "d", "domain": "x", "signature": 5}',
    ])
    async def test_parse_malformed(self, raw):
        """Test that malformed input is a parse failure"""
        with pytest.raises(InvalidRegistrationError, match="parse failure") as exc_info:
            await DapRegistration.parse(raw)
        assert exc_info.value.error_code == RegistrationErrorCodes.PARSE_FAILURE

    @pytest.mark.asyncio
    async def test_parse_failure_message(self):
        """Test the wording of parse failures"""
        with pytest.raises(RegistrationParseError) as exc_info:
            await DapRegistration.parse('not json')
        assert str(exc_info.value).startswith('Failed to parse DAP registration: parse failure: ')

    @pytest.mark.asyncio
    async def test_parse_deeply_nested(self):
        """Test that input nested past the decoder's depth is a parse failure"""
        with pytest.raises(RegistrationParseError, match="parse failure") as exc_info:
            await DapRegistration.parse('[' * 100_000 + ']' * 100_000)
        assert exc_info.value.error_code == RegistrationErrorCodes.PARSE_FAILURE

    @pytest.mark.asyncio
    async def test_parse_invalid_id(self, bearer_did):
        """Test that a malformed ID is rejected"""
        registration = DapRegistration.create(HANDLE, bearer_did.uri, DOMAIN)
        await registration.sign(bearer_did)

        data = dict(registration.to_dict(), id='reg_1234567890abcdef')

        with pytest.raises(InvalidRegistrationIdError, match="Invalid length"):
            await DapRegistration.parse(data)
