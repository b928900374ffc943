"""
Key resolvers that combine or replace the DID method resolvers

The default resolver is process-wide and read-mostly: it is created lazily
from the SDK configuration and then shared by every verification that does
not inject its own resolver.
"""

import logging
import threading
import time
from typing import Any, Dict, List, Optional, Tuple

from ..config import SDKConfig
from ..exceptions import ConfigError, InvalidIdentifierError, KeyMaterialError
from ..crypto.jwk import is_public_jwk
from ..signing.utils import maybe_await
from .types import KeyResolutionResult, KeyResolver, ResolutionErrors, VerificationMethod, parse_did_url
from .did_dht import DidDhtResolver
from .did_jwk import DidJwkResolver
from .did_web import DidWebResolver

logger = logging.getLogger(__name__)


class StaticKeyResolver:
    """
    Resolves key identifiers from an in-memory ``kid -> JWK`` map

    Useful for pinned keys and tests.
    """

    def __init__(self, keys: Optional[Dict[str, Dict[str, Any]]] = None):
        self.keys: Dict[str, Dict[str, Any]] = {}
        for kid, jwk in (keys or {}).items():
            self.add_key(kid, jwk)

    def add_key(self, kid: str, jwk: Dict[str, Any]) -> None:
        """
        Register a public key

        Raises:
            KeyMaterialError: If ``jwk`` is not a public JWK
        """
        if not is_public_jwk(jwk):
            raise KeyMaterialError("Key must be a public JWK", "INVALID_JWK", {'kid': kid})
        self.keys[kid] = dict(jwk)  # Create copy

    def remove_key(self, kid: str) -> None:
        self.keys.pop(kid, None)

    def resolve(self, kid: str) -> KeyResolutionResult:
        jwk = self.keys.get(kid)
        if jwk is None:
            return KeyResolutionResult.failed(ResolutionErrors.NOT_FOUND, f"Unknown key ID: {kid}")

        controller = kid.split('#', 1)[0]
        return KeyResolutionResult.found(VerificationMethod(
            id=kid,
            type='JsonWebKey',
            controller=controller,
            public_key_jwk=dict(jwk),
        ))


class UniversalResolver:
    """
    Dispatches key identifiers to a resolver per DID method

    Successful results are cached for ``cache_ttl`` seconds; failures are
    never cached.
    """

    def __init__(self, resolvers: Dict[str, KeyResolver], cache_ttl: int = 0):
        """
        Args:
            resolvers: DID method name -> resolver
            cache_ttl: Seconds to keep successful results (0 disables caching)
        """
        self.resolvers = dict(resolvers)
        self.cache_ttl = cache_ttl
        self._cache: Dict[str, Tuple[float, KeyResolutionResult]] = {}
        self._lock = threading.Lock()

    @property
    def supported_methods(self) -> List[str]:
        return sorted(self.resolvers)

    async def resolve(self, kid: str) -> KeyResolutionResult:
        cached = self._get_cached(kid)
        if cached is not None:
            return cached

        try:
            did_url = parse_did_url(kid)
        except InvalidIdentifierError as e:
            return KeyResolutionResult.failed(ResolutionErrors.INVALID_DID, str(e))

        resolver = self.resolvers.get(did_url.method)
        if resolver is None:
            logger.warning(f"No resolver for DID method '{did_url.method}'")
            return KeyResolutionResult.failed(
                ResolutionErrors.METHOD_NOT_SUPPORTED,
                f"Method not supported: {did_url.method}"
            )

        result = await maybe_await(resolver.resolve(kid))
        if result.public_key_jwk is not None:
            self._put_cached(kid, result)
        else:
            logger.debug(f"Resolution of {kid} failed: {result.error}")

        return result

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()

    def _get_cached(self, kid: str) -> Optional[KeyResolutionResult]:
        if self.cache_ttl <= 0:
            return None

        with self._lock:
            entry = self._cache.get(kid)
            if entry is None:
                return None
            expires_at, result = entry
            if time.monotonic() >= expires_at:
                del self._cache[kid]
                return None
            return result

    def _put_cached(self, kid: str, result: KeyResolutionResult) -> None:
        if self.cache_ttl <= 0:
            return

        with self._lock:
            self._cache[kid] = (time.monotonic() + self.cache_ttl, result)


_METHOD_FACTORIES = {
    'dht': lambda config: DidDhtResolver(
        gateway_url=config.dht_gateway_url, timeout=config.resolver_timeout, verify_ssl=config.verify_ssl
    ),
    'jwk': lambda config: DidJwkResolver(),
    'web': lambda config: DidWebResolver(timeout=config.resolver_timeout, verify_ssl=config.verify_ssl),
}

_default_resolver: Optional[KeyResolver] = None
_default_lock = threading.Lock()


def create_default_resolver(config: Optional[SDKConfig] = None) -> UniversalResolver:
    """
    Build a universal resolver for the DID methods enabled in ``config``.

    Raises:
        ConfigError: If the configuration enables an unknown DID method
    """
    config = config or SDKConfig()

    unknown = [method for method in config.did_methods if method not in _METHOD_FACTORIES]
    if unknown:
        raise ConfigError(f"Unsupported DID methods: {unknown}", "INVALID_DID_METHODS")

    resolvers = {method: _METHOD_FACTORIES[method](config) for method in config.did_methods}
    return UniversalResolver(resolvers, cache_ttl=config.resolver_cache_ttl)


def get_default_resolver() -> KeyResolver:
    """Get the process-wide default resolver, creating it on first use."""
    global _default_resolver
    with _default_lock:
        if _default_resolver is None:
            _default_resolver = create_default_resolver()
        return _default_resolver


def set_default_resolver(resolver: Optional[KeyResolver]) -> None:
    """Replace the process-wide default resolver (None resets it)."""
    global _default_resolver
    with _default_lock:
        _default_resolver = resolver
