"""
SDK configuration management

Provides configuration loading from dictionaries, JSON files and environment
variables, and applies the logging settings to the package logger.
"""

import json
import logging
import os
from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union
from urllib.parse import urlparse

from ..exceptions import ConfigError

ENV_PREFIX = 'DAP_SDK_'

DEFAULT_DID_METHODS = ['dht', 'jwk', 'web']

DEFAULT_DHT_GATEWAY_URL = 'https://diddht.tbddev.org'

_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass
class SDKConfig:
    """
    Configuration for the DAP SDK

    Attributes:
        registry_url: Base URL of the DAP registry (only its origin is used)
        resolver_timeout: Timeout in seconds for network DID resolution
        resolver_cache_ttl: Seconds to cache resolved keys (0 disables caching)
        verify_ssl: Verify TLS certificates for registry and DID resolution requests
        did_methods: DID methods the default resolver accepts
        dht_gateway_url: Pkarr relay gateway used for did:dht resolution
        log_level: Level applied to the ``dap_sdk`` logger
    """
    registry_url: Optional[str] = None
    resolver_timeout: float = 10.0
    resolver_cache_ttl: int = 300
    verify_ssl: bool = True
    did_methods: List[str] = field(default_factory=lambda: list(DEFAULT_DID_METHODS))
    dht_gateway_url: str = DEFAULT_DHT_GATEWAY_URL
    log_level: str = 'WARNING'

    def __post_init__(self):
        """Validate configuration"""
        if self.registry_url is not None:
            parsed = urlparse(self.registry_url)
            if not parsed.scheme or not parsed.netloc:
                raise ConfigError(f"Invalid registry URL format: {self.registry_url}", "INVALID_REGISTRY_URL")

        if self.resolver_timeout <= 0:
            raise ConfigError("Resolver timeout must be positive", "INVALID_TIMEOUT")

        if self.resolver_cache_ttl < 0:
            raise ConfigError("Resolver cache TTL must be non-negative", "INVALID_CACHE_TTL")

        parsed = urlparse(self.dht_gateway_url)
        if not parsed.scheme or not parsed.netloc:
            raise ConfigError(f"Invalid DHT gateway URL format: {self.dht_gateway_url}", "INVALID_DHT_GATEWAY_URL")

        if not self.did_methods:
            raise ConfigError("At least one DID method must be enabled", "INVALID_DID_METHODS")

        self.log_level = str(self.log_level).upper()
        if self.log_level not in _LOG_LEVELS:
            raise ConfigError(f"Unknown log level: {self.log_level}", "INVALID_LOG_LEVEL")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config_from_dict(data: Mapping[str, Any]) -> SDKConfig:
    """
    Build configuration from a dictionary.

    Raises:
        ConfigError: On unknown keys or invalid values
    """
    known = {f.name for f in fields(SDKConfig)}
    unknown = set(data) - known
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {sorted(unknown)}", "INVALID_FORMAT")

    try:
        return SDKConfig(**data)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration format: {e}", "INVALID_FORMAT") from e


def load_config_from_file(file_path: Union[str, Path]) -> SDKConfig:
    """Load configuration from a JSON file"""
    try:
        with open(Path(file_path), 'r', encoding='utf-8') as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"Failed to read configuration file: {e}", "FILE_ERROR") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Failed to parse configuration JSON: {e}", "PARSE_ERROR") from e

    if not isinstance(data, dict):
        raise ConfigError("Configuration file must contain a JSON object", "INVALID_FORMAT")

    return load_config_from_dict(data)


def load_config_from_env(environ: Optional[Mapping[str, str]] = None) -> SDKConfig:
    """
    Load configuration from ``DAP_SDK_*`` environment variables.

    Recognised variables: DAP_SDK_REGISTRY_URL, DAP_SDK_RESOLVER_TIMEOUT,
    DAP_SDK_RESOLVER_CACHE_TTL, DAP_SDK_VERIFY_SSL, DAP_SDK_DID_METHODS
    (comma separated), DAP_SDK_DHT_GATEWAY_URL and DAP_SDK_LOG_LEVEL. Unset
    variables keep defaults.
    """
    environ = os.environ if environ is None else environ
    data: Dict[str, Any] = {}

    try:
        if f'{ENV_PREFIX}REGISTRY_URL' in environ:
            data['registry_url'] = environ[f'{ENV_PREFIX}REGISTRY_URL']
        if f'{ENV_PREFIX}RESOLVER_TIMEOUT' in environ:
            data['resolver_timeout'] = float(environ[f'{ENV_PREFIX}RESOLVER_TIMEOUT'])
        if f'{ENV_PREFIX}RESOLVER_CACHE_TTL' in environ:
            data['resolver_cache_ttl'] = int(environ[f'{ENV_PREFIX}RESOLVER_CACHE_TTL'])
    except ValueError as e:
        raise ConfigError(f"Invalid numeric environment value: {e}", "INVALID_FORMAT") from e

    if f'{ENV_PREFIX}VERIFY_SSL' in environ:
        data['verify_ssl'] = environ[f'{ENV_PREFIX}VERIFY_SSL'].strip().lower() not in ('0', 'false', 'no', 'off')
    if f'{ENV_PREFIX}DID_METHODS' in environ:
        data['did_methods'] = [m.strip() for m in environ[f'{ENV_PREFIX}DID_METHODS'].split(',') if m.strip()]
    if f'{ENV_PREFIX}DHT_GATEWAY_URL' in environ:
        data['dht_gateway_url'] = environ[f'{ENV_PREFIX}DHT_GATEWAY_URL']
    if f'{ENV_PREFIX}LOG_LEVEL' in environ:
        data['log_level'] = environ[f'{ENV_PREFIX}LOG_LEVEL']

    return load_config_from_dict(data)


def configure_logging(config: SDKConfig) -> logging.Logger:
    """
    Apply the configured level to the package logger.

    Handlers are left to the application.
    """
    logger = logging.getLogger('dap_sdk')
    logger.setLevel(config.log_level)
    return logger
