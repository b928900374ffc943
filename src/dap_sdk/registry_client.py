"""
HTTP client for DAP registry communication

This module submits signed DAP registrations to a registry and returns the
registry's proof of registration.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import SDKConfig
from .exceptions import ConfigError, ServerCommunicationError
from .registration import DapRegistration
from .version import __version__

logger = logging.getLogger(__name__)

REGISTER_ENDPOINT = '/daps'


@dataclass
class RegistryConfig:
    """Configuration for DAP registry connection."""
    base_url: str
    timeout: float = 30.0
    verify_ssl: bool = True
    retry_attempts: int = 3
    retry_backoff_factor: float = 0.3

    def __post_init__(self):
        """Validate registry configuration and reduce the base URL to its origin."""
        if not self.base_url:
            raise ConfigError("Registry base_url cannot be empty", "INVALID_REGISTRY_URL")

        parsed = urlparse(self.base_url)
        if not parsed.scheme or not parsed.netloc:
            raise ConfigError(f"Invalid registry URL format: {self.base_url}", "INVALID_REGISTRY_URL")

        self.base_url = f"{parsed.scheme}://{parsed.netloc}"

        if self.timeout <= 0:
            raise ConfigError("Timeout must be positive", "INVALID_TIMEOUT")

        if self.retry_attempts < 0:
            raise ConfigError("Retry attempts must be non-negative", "INVALID_RETRY_ATTEMPTS")

    @classmethod
    def from_config(cls, config: SDKConfig) -> 'RegistryConfig':
        """
        Build registry configuration from SDK configuration.

        Raises:
            ConfigError: If ``config`` has no registry URL
        """
        if not config.registry_url:
            raise ConfigError("SDK configuration has no registry_url", "MISSING_REGISTRY_URL")

        return cls(
            base_url=config.registry_url,
            timeout=config.resolver_timeout,
            verify_ssl=config.verify_ssl,
        )


@dataclass
class RegistrationResponse:
    """Registry response to a successful registration."""
    proof: Dict[str, Any]


class DapRegistryClient:
    """
    HTTP client for a DAP registry.

    Idempotent requests are retried on transient server errors; registrations
    are sent once. Registry error bodies and transport failures are raised as
    :class:`ServerCommunicationError`.
    """

    def __init__(self, config: RegistryConfig, session: Optional[requests.Session] = None):
        """
        Initialize the registry client.

        Args:
            config: Registry configuration settings
            session: Optional pre-configured session (mainly for tests)
        """
        self.config = config
        self.session = session or self._create_session()

        logger.info(f"Initialized DAP registry client for: {config.base_url}")

    def _create_session(self) -> requests.Session:
        """Create HTTP session with retry logic."""
        session = requests.Session()

        retry_strategy = Retry(
            total=self.config.retry_attempts,
            status_forcelist=[429, 500, 502, 503, 504],
            # Registrations (POST) are never retried
            allowed_methods=["HEAD", "GET", "OPTIONS"],
            backoff_factor=self.config.retry_backoff_factor,
            raise_on_status=False,
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        session.headers.update({
            'Content-Type': 'application/json',
            'Accept': 'application/json',
            'User-Agent': f'DAP-Python-SDK/{__version__}'
        })

        return session

    def _make_request(self, method: str, endpoint: str, **kwargs) -> Dict[str, Any]:
        """
        Make HTTP request with error handling.

        Returns:
            dict: Response JSON data

        Raises:
            ServerCommunicationError: On HTTP, network or registry errors
        """
        url = f"{self.config.base_url}{endpoint}"

        kwargs.setdefault('timeout', self.config.timeout)
        kwargs.setdefault('verify', self.config.verify_ssl)

        try:
            logger.debug(f"Making {method} request to {url}")
            response = self.session.request(method, url, **kwargs)
        except requests.exceptions.Timeout:
            raise ServerCommunicationError(
                f"Request timeout after {self.config.timeout} seconds", "TIMEOUT"
            )
        except requests.exceptions.ConnectionError as e:
            raise ServerCommunicationError(f"Connection error: {e}", "CONNECTION_ERROR")
        except requests.exceptions.RequestException as e:
            raise ServerCommunicationError(f"Request failed: {e}")

        try:
            data = response.json()
        except ValueError:
            data = None

        if isinstance(data, dict) and isinstance(data.get('error'), dict):
            message = data['error'].get('message', f'HTTP {response.status_code}')
            raise ServerCommunicationError(
                f"Registry request failed: {message}",
                "REGISTRY_ERROR",
                http_status=response.status_code,
                details={'error': data['error']}
            )

        if not response.ok:
            raise ServerCommunicationError(
                f"Registry request failed: HTTP {response.status_code}: {response.reason}",
                "HTTP_ERROR",
                http_status=response.status_code
            )

        if not isinstance(data, dict):
            raise ServerCommunicationError(
                "Invalid JSON response", "INVALID_RESPONSE", http_status=response.status_code
            )

        return data

    def register(self, registration: DapRegistration) -> RegistrationResponse:
        """
        Submit a signed registration to the registry.

        Args:
            registration: The signed registration

        Returns:
            RegistrationResponse: The registry's proof of registration

        Raises:
            ServerCommunicationError: On network or registry errors
        """
        logger.info(f"Registering {registration.dap} for {registration.did}")

        data = self._make_request('POST', REGISTER_ENDPOINT, json=registration.to_dict())

        proof = data.get('proof')
        if not isinstance(proof, dict):
            raise ServerCommunicationError("Registry response is missing proof", "INVALID_RESPONSE")

        logger.info(f"Registration {proof.get('id', registration.id)} accepted")
        return RegistrationResponse(proof=proof)

    def close(self):
        """Close the HTTP session."""
        self.session.close()
        logger.debug("HTTP session closed")

    def __enter__(self) -> 'DapRegistryClient':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def create_client(
    base_url: str,
    timeout: float = 30.0,
    verify_ssl: bool = True,
    retry_attempts: int = 3
) -> DapRegistryClient:
    """
    Create DAP registry client with default configuration.

    Args:
        base_url: Registry URL (only its origin is used)
        timeout: Request timeout in seconds
        verify_ssl: Whether to verify SSL certificates
        retry_attempts: Number of retry attempts for failed requests
    """
    config = RegistryConfig(
        base_url=base_url,
        timeout=timeout,
        verify_ssl=verify_ssl,
        retry_attempts=retry_attempts
    )
    return DapRegistryClient(config)
