"""
DAP Python SDK
Decentralized Agnostic Paytag registrations with compact JWS signatures
"""

from .version import __version__
from .identifiers import Urn, Dap, RegistrationId
from .crypto import (
    canonicalize,
    digest,
    Ed25519KeyPair,
    generate_key_pair,
)
from .exceptions import (
    DapSDKError,
    InvalidIdentifierError,
    InvalidUrnError,
    InvalidDapError,
    InvalidRegistrationIdError,
    SerializationError,
    InvalidJwsError,
    MalformedJwsError,
    UnresolvableKeyError,
    IntegrityError,
    InvalidRegistrationError,
    RegistrationParseError,
    KeyMaterialError,
    ConfigError,
    ServerCommunicationError,
    IdentifierErrorCodes,
    SerializationErrorCodes,
    VerificationErrorCodes,
    RegistrationErrorCodes,
)
from .signing import (
    Signer,
    CompactJws,
    sign_jws,
    Ed25519Signer,
    EcdsaSigner,
)
from .verification import CompactJwsVerifier, verify_jws
from .resolution import (
    KeyResolver,
    KeyResolutionResult,
    VerificationMethod,
    DidJwk,
    BearerDid,
    DidJwkResolver,
    DidWebResolver,
    DidDhtResolver,
    StaticKeyResolver,
    UniversalResolver,
    create_default_resolver,
    get_default_resolver,
    set_default_resolver,
)
from .config import (
    SDKConfig,
    load_config_from_dict,
    load_config_from_file,
    load_config_from_env,
    configure_logging,
)
from .registration import DapRegistration
from .registry_client import (
    DapRegistryClient,
    RegistryConfig,
    RegistrationResponse,
    create_client,
)

# Public API exports
__all__ = [
    '__version__',
    # Identifiers
    'Urn',
    'Dap',
    'RegistrationId',
    # Crypto
    'canonicalize',
    'digest',
    'Ed25519KeyPair',
    'generate_key_pair',
    # Exceptions
    'DapSDKError',
    'InvalidIdentifierError',
    'InvalidUrnError',
    'InvalidDapError',
    'InvalidRegistrationIdError',
    'SerializationError',
    'InvalidJwsError',
    'MalformedJwsError',
    'UnresolvableKeyError',
    'IntegrityError',
    'InvalidRegistrationError',
    'RegistrationParseError',
    'KeyMaterialError',
    'ConfigError',
    'ServerCommunicationError',
    'IdentifierErrorCodes',
    'SerializationErrorCodes',
    'VerificationErrorCodes',
    'RegistrationErrorCodes',
    # Signing
    'Signer',
    'CompactJws',
    'sign_jws',
    'Ed25519Signer',
    'EcdsaSigner',
    # Verification
    'CompactJwsVerifier',
    'verify_jws',
    # Resolution
    'KeyResolver',
    'KeyResolutionResult',
    'VerificationMethod',
    'DidJwk',
    'BearerDid',
    'DidJwkResolver',
    'DidWebResolver',
    'DidDhtResolver',
    'StaticKeyResolver',
    'UniversalResolver',
    'create_default_resolver',
    'get_default_resolver',
    'set_default_resolver',
    # Configuration
    'SDKConfig',
    'load_config_from_dict',
    'load_config_from_file',
    'load_config_from_env',
    'configure_logging',
    # Registration
    'DapRegistration',
    'DapRegistryClient',
    'RegistryConfig',
    'RegistrationResponse',
    'create_client',
]
