"""
Configuration management for DAP Python SDK
"""

from .sdk_config import (
    SDKConfig,
    DEFAULT_DID_METHODS,
    DEFAULT_DHT_GATEWAY_URL,
    load_config_from_dict,
    load_config_from_file,
    load_config_from_env,
    configure_logging,
)

__all__ = [
    'SDKConfig',
    'DEFAULT_DID_METHODS',
    'DEFAULT_DHT_GATEWAY_URL',
    'load_config_from_dict',
    'load_config_from_file',
    'load_config_from_env',
    'configure_logging',
]
