"""
Exception classes for DAP Python SDK
"""

from typing import Optional, Dict, Any


class DapSDKError(Exception):
    """Base exception for all DAP SDK errors"""

    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class InvalidIdentifierError(DapSDKError):
    """Exception raised when a URN, DAP or registration ID does not match its grammar"""
    pass


class InvalidUrnError(InvalidIdentifierError):
    """Exception raised for strings that are not valid URNs"""

    def __init__(self, reason: Optional[str] = None, error_code: str = "INVALID_URN",
                 details: Optional[Dict[str, Any]] = None):
        message = f"Invalid URN: {reason}" if reason else "Invalid URN"
        super().__init__(message, error_code, details)


class InvalidDapError(InvalidIdentifierError):
    """Exception raised for strings that are not valid DAPs"""

    def __init__(self, reason: Optional[str] = None, error_code: str = "INVALID_DAP",
                 details: Optional[Dict[str, Any]] = None):
        message = f"Invalid DAP: {reason}" if reason else "Invalid DAP"
        super().__init__(message, error_code, details)


class InvalidRegistrationIdError(InvalidIdentifierError):
    """Exception raised for strings that are not valid registration IDs"""

    def __init__(self, reason: Optional[str] = None, error_code: str = "INVALID_REGISTRATION_ID",
                 details: Optional[Dict[str, Any]] = None):
        message = f"Invalid Registration ID: {reason}" if reason else "Invalid Registration ID"
        super().__init__(message, error_code, details)


class SerializationError(DapSDKError):
    """Exception raised when a payload cannot be canonicalized"""
    pass


class InvalidJwsError(DapSDKError):
    """Base exception for compact JWS verification failures"""

    def __init__(self, reason: str, error_code: str = "INVALID_JWS",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(f"Signature verification failed: {reason}", error_code, details)


class MalformedJwsError(InvalidJwsError):
    """Exception raised when a compact JWS or its header is structurally invalid"""
    pass


class UnresolvableKeyError(InvalidJwsError):
    """Exception raised when a key ID cannot be dereferenced to public key material"""
    pass


class IntegrityError(InvalidJwsError):
    """Exception raised when a signature does not match the signed data"""
    pass


class InvalidRegistrationError(DapSDKError):
    """Exception raised when a DAP registration is unparseable or its signature is not trustworthy"""

    def __init__(self, reason: str, error_code: str = "INVALID_REGISTRATION",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(f"Invalid DAP Registration: {reason}", error_code, details)


class RegistrationParseError(InvalidRegistrationError):
    """Exception raised when raw input cannot be turned into a DAP registration"""

    def __init__(self, cause: str, error_code: str = "PARSE_FAILURE",
                 details: Optional[Dict[str, Any]] = None):
        DapSDKError.__init__(self, f"Failed to parse DAP registration: parse failure: {cause}", error_code, details)


class KeyMaterialError(DapSDKError):
    """Exception raised for key generation, JWK conversion or signing errors"""
    pass


class ConfigError(DapSDKError):
    """Exception raised for configuration loading and validation errors"""
    pass


class ServerCommunicationError(DapSDKError):
    """Exception raised for registry communication errors"""

    def __init__(self, message: str, error_code: str = "SERVER_ERROR",
                 http_status: int = 0, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)
        self.http_status = http_status


class IdentifierErrorCodes:
    """Structural rules an identifier can violate"""

    INVALID_TYPE = "INVALID_TYPE"
    MISSING_PREFIX = "MISSING_PREFIX"
    MISSING_SEPARATOR = "MISSING_SEPARATOR"
    EMPTY_SEGMENT = "EMPTY_SEGMENT"
    UNEXPECTED_CHARACTER = "UNEXPECTED_CHARACTER"
    INVALID_CHARACTER = "INVALID_CHARACTER"
    WRONG_PREFIX = "WRONG_PREFIX"
    WRONG_LENGTH = "WRONG_LENGTH"
    TIMESTAMP_OUT_OF_RANGE = "TIMESTAMP_OUT_OF_RANGE"


class SerializationErrorCodes:
    """Reasons a payload cannot be canonicalized"""

    UNSUPPORTED_TYPE = "UNSUPPORTED_TYPE"
    NON_STRING_KEY = "NON_STRING_KEY"
    NUMBER_OUT_OF_RANGE = "NUMBER_OUT_OF_RANGE"
    CIRCULAR_REFERENCE = "CIRCULAR_REFERENCE"
    NESTING_TOO_DEEP = "NESTING_TOO_DEEP"


class VerificationErrorCodes:
    """Standard error codes for compact JWS verification"""

    # Structure
    NOT_A_STRING = "NOT_A_STRING"
    WRONG_SEGMENT_COUNT = "WRONG_SEGMENT_COUNT"
    PAYLOAD_NOT_DETACHED = "PAYLOAD_NOT_DETACHED"
    INVALID_HEADER = "INVALID_HEADER"
    INVALID_ALGORITHM = "INVALID_ALGORITHM"
    INVALID_KEY_ID = "INVALID_KEY_ID"
    UNSUPPORTED_ALGORITHM = "UNSUPPORTED_ALGORITHM"

    # Keys
    UNRESOLVABLE_KEY = "UNRESOLVABLE_KEY"

    # Crypto
    INTEGRITY_MISMATCH = "INTEGRITY_MISMATCH"


class RegistrationErrorCodes:
    """Standard error codes for DAP registrations"""

    PARSE_FAILURE = "PARSE_FAILURE"
    INVALID_FIELD = "INVALID_FIELD"
    SIGNATURE_MISSING = "SIGNATURE_MISSING"
    DID_MISMATCH = "DID_MISMATCH"
