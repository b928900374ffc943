"""
Unit tests for URN, DAP and registration ID identifiers
"""

import pytest
import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from dap_sdk.identifiers import Urn, Dap, RegistrationId
from dap_sdk.identifiers.registration_id import (
    SUFFIX_LENGTH,
    MAX_TIMESTAMP_MS,
    MAX_DATE_MS,
    encode_base32,
    decode_base32,
)
from dap_sdk.exceptions import (
    InvalidIdentifierError,
    InvalidUrnError,
    InvalidDapError,
    InvalidRegistrationIdError,
    IdentifierErrorCodes,
)


def _ms(value: str) -> int:
    moment = datetime.strptime(value, '%Y-%m-%dT%H:%M:%S.%f').replace(tzinfo=timezone.utc)
    return (moment - datetime(1970, 1, 1, tzinfo=timezone.utc)) // timedelta(milliseconds=1)


class TestUrn:
    """Test cases for URN parsing and formatting"""

    def test_parse_valid_urn(self):
        """Test parsing a URN whose nss contains colons"""
        urn = Urn.parse('urn:nid:nss1:nss2:nss3')

        assert urn.nid == 'nid'
        assert urn.nss == 'nss1:nss2:nss3'
        assert str(urn) == 'urn:nid:nss1:nss2:nss3'

    def test_round_trip(self):
        """Test that formatting a parsed URN gives back the input"""
        for value in ['urn:isbn:0451450523', 'urn:ietf:rfc:2648', 'urn:a:b']:
            assert str(Urn.parse(value)) == value

    def test_construct_and_format(self):
        """Test formatting a URN built from parts"""
        assert str(Urn('example', 'a:b')) == 'urn:example:a:b'

    @pytest.mark.parametrize('value', [
        '',
        'invalid:nid:nss',
        'invalid::nss',
        'invalid:nid:',
        'invalid:nid',
        'invalid:',
        'invalid::',
    ])
    def test_parse_invalid_urn(self, value):
        """Test that malformed URNs are rejected"""
        with pytest.raises(InvalidUrnError, match="Invalid URN"):
            Urn.parse(value)

    def test_invalid_urn_causes(self):
        """Test that each grammar violation has its own error code"""
        cases = {
            'nid:nss': IdentifierErrorCodes.MISSING_PREFIX,
            'urn:nid': IdentifierErrorCodes.MISSING_SEPARATOR,
            'urn::nss': IdentifierErrorCodes.EMPTY_SEGMENT,
            'urn:nid:': IdentifierErrorCodes.EMPTY_SEGMENT,
            'urn:nid:a\nb': IdentifierErrorCodes.INVALID_CHARACTER,
        }
        for value, code in cases.items():
            with pytest.raises(InvalidUrnError) as exc_info:
                Urn.parse(value)
            assert exc_info.value.error_code == code

    def test_parse_non_string(self):
        """Test that non-string input is rejected"""
        with pytest.raises(InvalidUrnError) as exc_info:
            Urn.parse(None)
        assert exc_info.value.error_code == IdentifierErrorCodes.INVALID_TYPE

    def test_urn_is_value_type(self):
        """Test equality, hashing and immutability"""
        assert Urn.parse('urn:a:b') == Urn('a', 'b')
        assert hash(Urn.parse('urn:a:b')) == hash(Urn('a', 'b'))
        with pytest.raises(AttributeError):
            Urn('a', 'b').nid = 'c'


class TestDap:
    """Test cases for DAP parsing and formatting"""

    def test_parse_valid_dap(self):
        """Test parsing a well-formed DAP"""
        dap = Dap.parse('@moegrammer/didpay.me')

        assert dap.handle == 'moegrammer'
        assert dap.domain == 'didpay.me'

    def test_format_dap(self):
        """Test formatting a DAP built from parts"""
        assert str(Dap('moegrammer', 'didpay.me')) == '@moegrammer/didpay.me'

    def test_round_trip(self):
        """Test that formatting a parsed DAP gives back the input"""
        for value in ['@a/b', '@moe.grammer/sub.didpay.me', '@handle/domain.com:8080']:
            assert str(Dap.parse(value)) == value

    @pytest.mark.parametrize('value', [
        '',
        'a',
        '@handle',
        '@handle/',
        '@handle@/domain.com',
        '@@handle/domain.com',
        '@handle//domain.com',
        '@handle/@domain.com',
        '@handle/domain.com@',
        '@handle/domain.com/',
        'handle@domain.com',
    ])
    def test_parse_invalid_dap(self, value):
        """Test that malformed DAPs are rejected"""
        with pytest.raises(InvalidDapError, match="Invalid DAP"):
            Dap.parse(value)

    def test_invalid_dap_causes(self):
        """Test that each grammar violation has its own error code"""
        cases = {
            'handle/domain.com': IdentifierErrorCodes.MISSING_PREFIX,
            '@handle': IdentifierErrorCodes.MISSING_SEPARATOR,
            '@/domain.com': IdentifierErrorCodes.EMPTY_SEGMENT,
            '@handle/': IdentifierErrorCodes.EMPTY_SEGMENT,
            '@handle/domain.com/': IdentifierErrorCodes.UNEXPECTED_CHARACTER,
            '@@handle/domain.com': IdentifierErrorCodes.UNEXPECTED_CHARACTER,
            '@han@dle/domain.com': IdentifierErrorCodes.UNEXPECTED_CHARACTER,
        }
        for value, code in cases.items():
            with pytest.raises(InvalidDapError) as exc_info:
                Dap.parse(value)
            assert exc_info.value.error_code == code, value

    def test_invalid_dap_is_identifier_error(self):
        """Test the exception hierarchy"""
        with pytest.raises(InvalidIdentifierError):
            Dap.parse('nope')


class TestRegistrationIdCreation:
    """Test cases for registration ID creation"""

    def test_string_form(self):
        """Test the reg_ prefix and suffix alphabet"""
        registration_id = str(RegistrationId.create())

        assert registration_id.startswith('reg_')
        suffix = registration_id[len('reg_'):]
        assert len(suffix) == SUFFIX_LENGTH
        assert all(c in '0123456789abcdefghjkmnpqrstvwxyz' for c in suffix)
        assert suffix[0] <= '7'

    def test_uuid_v7_layout(self):
        """Test version and variant bits"""
        value = RegistrationId.create().to_uuid()

        assert value.version == 7
        assert value.variant == uuid.RFC_4122

    def test_uniqueness(self):
        """Test that IDs created in a tight loop are all distinct"""
        ids = {str(RegistrationId.create()) for _ in range(1000)}
        assert len(ids) == 1000

    def test_uniqueness_at_same_millisecond(self):
        """Test that IDs sharing a timestamp still differ"""
        ids = {RegistrationId.create(timestamp_ms=1_000) for _ in range(100)}
        assert len(ids) == 100

    def test_timestamp_close_to_clock(self):
        """Test that the embedded time is close to the wall clock"""
        now = datetime.now(timezone.utc)
        created = RegistrationId.create().extract_date()

        assert abs((created - now).total_seconds()) < 1

    def test_millisecond_precision_with_controlled_clock(self):
        """Test exact 1 ms difference between IDs created 1 ms apart"""
        first_ms = _ms('2021-07-15T00:00:00.000')
        second_ms = _ms('2021-07-15T00:00:00.001')

        with patch('dap_sdk.identifiers.registration_id.time.time_ns', return_value=first_ms * 1_000_000):
            first = RegistrationId.create()
        with patch('dap_sdk.identifiers.registration_id.time.time_ns', return_value=second_ms * 1_000_000):
            second = RegistrationId.create()

        delta = second.extract_date() - first.extract_date()
        assert delta.total_seconds() * 1000 == pytest.approx(1)
        assert second.extract_timestamp() - first.extract_timestamp() == 1
        assert first < second

    @pytest.mark.parametrize('value', [
        '2100-01-01T00:00:00.000',
        '1970-01-02T00:00:00.000',
        '2021-07-15T12:34:56.789',
    ])
    def test_extract_date(self, value):
        """Test that the embedded date is returned exactly"""
        timestamp_ms = _ms(value)
        registration_id = RegistrationId.create(timestamp_ms=timestamp_ms)

        assert registration_id.extract_timestamp() == timestamp_ms
        assert registration_id.extract_date() == datetime.strptime(
            value, '%Y-%m-%dT%H:%M:%S.%f').replace(tzinfo=timezone.utc)

    def test_timestamp_out_of_range(self):
        """Test that timestamps wider than 48 bits are rejected"""
        for timestamp_ms in [-1, MAX_TIMESTAMP_MS + 1]:
            with pytest.raises(InvalidRegistrationIdError) as exc_info:
                RegistrationId.create(timestamp_ms=timestamp_ms)
            assert exc_info.value.error_code == IdentifierErrorCodes.TIMESTAMP_OUT_OF_RANGE

    def test_max_timestamp(self):
        """Test the largest representable timestamp"""
        registration_id = RegistrationId.create(timestamp_ms=MAX_TIMESTAMP_MS)
        assert RegistrationId.parse(str(registration_id)).extract_timestamp() == MAX_TIMESTAMP_MS

    @pytest.mark.parametrize('timestamp_ms', [MAX_DATE_MS + 1, MAX_TIMESTAMP_MS])
    def test_extract_date_past_year_9999(self, timestamp_ms):
        """Test that IDs dated after year 9999 keep their timestamp but have no date"""
        registration_id = RegistrationId.parse(str(RegistrationId.create(timestamp_ms=timestamp_ms)))

        assert registration_id.extract_timestamp() == timestamp_ms
        with pytest.raises(InvalidRegistrationIdError, match="Timestamp out of range") as exc_info:
            registration_id.extract_date()
        assert exc_info.value.error_code == IdentifierErrorCodes.TIMESTAMP_OUT_OF_RANGE

    def test_extract_latest_date(self):
        """Test the last millisecond a date can hold"""
        registration_id = RegistrationId.create(timestamp_ms=MAX_DATE_MS)

        assert registration_id.extract_date() == datetime(9999, 12, 31, 23, 59, 59, 999000, tzinfo=timezone.utc)

    def test_generated_by_uuid7(self):
        """Test that fresh IDs take their random bits from uuid7()"""
        generated = uuid.UUID('01890a5d-ac96-774b-bcce-b302099a8057')

        with patch('dap_sdk.identifiers.registration_id.uuid7', return_value=generated):
            registration_id = RegistrationId.create(timestamp_ms=1_000)

        assert registration_id.value[6:] == generated.bytes[6:]
        assert registration_id.extract_timestamp() == 1_000

    def test_raw_value_length(self):
        """Test that raw values must be 16 bytes"""
        with pytest.raises(InvalidRegistrationIdError, match="Invalid length"):
            RegistrationId(b'\x00' * 15)


class TestRegistrationIdParsing:
    """Test cases for registration ID parsing"""

    def test_parse_round_trip(self):
        """Test parsing the string form of a created ID"""
        registration_id = RegistrationId.create()
        parsed = RegistrationId.parse(str(registration_id))

        assert parsed == registration_id
        assert str(parsed) == str(registration_id)
        assert parsed.extract_timestamp() == registration_id.extract_timestamp()

    def test_parse_wrong_length(self):
        """Test that a short suffix fails with a length error"""
        with pytest.raises(InvalidRegistrationIdError, match="Invalid length") as exc_info:
            RegistrationId.parse('reg_1234567890abcdef')
        assert exc_info.value.error_code == IdentifierErrorCodes.WRONG_LENGTH

    def test_parse_missing_prefix(self):
        """Test that a bare suffix fails with a prefix error"""
        with pytest.raises(InvalidRegistrationIdError, match='prefix must be "reg"') as exc_info:
            RegistrationId.parse('1234567890abcdef1234567890')
        assert exc_info.value.error_code == IdentifierErrorCodes.WRONG_PREFIX

    def test_parse_wrong_prefix(self):
        """Test that another TypeID prefix is rejected"""
        suffix = str(RegistrationId.create())[len('reg_'):]
        with pytest.raises(InvalidRegistrationIdError) as exc_info:
            RegistrationId.parse(f'user_{suffix}')
        assert exc_info.value.error_code == IdentifierErrorCodes.WRONG_PREFIX

    def test_prefix_checked_before_length(self):
        """Test that a wrong prefix is reported even when the length is also wrong"""
        with pytest.raises(InvalidRegistrationIdError) as exc_info:
            RegistrationId.parse('usr_123')
        assert exc_info.value.error_code == IdentifierErrorCodes.WRONG_PREFIX

    def test_parse_invalid_characters(self):
        """Test that characters outside the alphabet are rejected"""
        for suffix in ['0' * 25 + 'u', '0' * 25 + 'U', '0' * 25 + 'i', '8' + '0' * 25]:
            with pytest.raises(InvalidRegistrationIdError) as exc_info:
                RegistrationId.parse(f'reg_{suffix}')
            assert exc_info.value.error_code == IdentifierErrorCodes.INVALID_CHARACTER

    def test_parse_non_string(self):
        """Test that non-string input is rejected"""
        with pytest.raises(InvalidRegistrationIdError) as exc_info:
            RegistrationId.parse(12345)
        assert exc_info.value.error_code == IdentifierErrorCodes.INVALID_TYPE

    def test_ordering_by_creation_time(self):
        """Test that IDs from different milliseconds sort by time"""
        ids = [RegistrationId.create(timestamp_ms=ms) for ms in (3_000, 1_000, 2_000)]
        assert [i.extract_timestamp() for i in sorted(ids)] == [1_000, 2_000, 3_000]


class TestBase32:
    """Test cases for the Crockford base32 suffix codec"""

    def test_known_values(self):
        """Test encoding of all-zero and all-one values"""
        assert encode_base32(b'\x00' * 16) == '0' * 26
        assert encode_base32(b'\xff' * 16) == '7' + 'z' * 25

    def test_decode_known_values(self):
        """Test decoding of all-zero and all-one values"""
        assert decode_base32('0' * 26) == b'\x00' * 16
        assert decode_base32('7' + 'z' * 25) == b'\xff' * 16

    def test_decode_matches_uuid(self):
        """Test that the decoded value is the UUID shown by to_uuid"""
        registration_id = RegistrationId.create()
        suffix = str(registration_id)[len('reg_'):]

        assert uuid.UUID(bytes=decode_base32(suffix)) == registration_id.to_uuid()
