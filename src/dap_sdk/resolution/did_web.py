"""
did:web resolution over HTTPS

``did:web:example.com`` resolves to ``https://example.com/.well-known/did.json``
and ``did:web:example.com:users:alice`` to
``https://example.com/users/alice/did.json``. Port numbers are percent-encoded
in the DID (``example.com%3A8443``).
"""

import asyncio
import logging
from typing import Any, Dict, Optional
from urllib.parse import unquote

import requests

from ..exceptions import InvalidIdentifierError
from .types import KeyResolutionResult, ResolutionErrors, VerificationMethod, DidUrl, parse_did_url

logger = logging.getLogger(__name__)

METHOD = 'web'
WELL_KNOWN_PATH = '.well-known'
DOCUMENT_NAME = 'did.json'


def did_web_to_url(did_url: DidUrl) -> str:
    """Map a did:web DID to the URL of its DID document."""
    domain, *path = did_url.id.split(':')
    segments = [unquote(domain)] + [unquote(segment) for segment in path]
    if not path:
        segments.append(WELL_KNOWN_PATH)
    return 'https://' + '/'.join(segments + [DOCUMENT_NAME])


class DidWebResolver:
    """
    Resolves ``did:web`` key identifiers by fetching the DID document

    Network and document errors are reported as unsuccessful results rather
    than raised.
    """

    def __init__(self, timeout: float = 10.0, verify_ssl: bool = True,
                 session: Optional[requests.Session] = None):
        """
        Args:
            timeout: Request timeout in seconds
            verify_ssl: Verify TLS certificates
            session: Optional session to reuse (a new one is created otherwise)
        """
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.session = session or requests.Session()
        self.session.headers.update({'Accept': 'application/did+json, application/json'})

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

        loop = asyncio.get_running_loop()
        document = await loop.run_in_executor(None, self._fetch_document, did_url)
        if document is None:
            return KeyResolutionResult.failed(ResolutionErrors.NOT_FOUND, f"DID document not found for {did_url.did}")

        if document.get('id') != did_url.did:
            logger.warning(f"DID document id {document.get('id')!r} does not match {did_url.did}")
            return KeyResolutionResult.failed(ResolutionErrors.INVALID_DID, "DID document id does not match the DID")

        target = f'{did_url.did}#{did_url.fragment}'
        methods = document.get('verificationMethod')
        for entry in methods if isinstance(methods, list) else []:
            if not isinstance(entry, dict):
                continue
            try:
                method = VerificationMethod.from_dict(entry, did_url.did)
            except ValueError:
                logger.debug(f"Skipping verification method without an id in {did_url.did}")
                continue
            if method.id == target:
                return KeyResolutionResult.found(method)

        return KeyResolutionResult.failed(ResolutionErrors.NOT_FOUND, f"No verification method {target}")

    def _fetch_document(self, did_url: DidUrl) -> Optional[Dict[str, Any]]:
        url = did_web_to_url(did_url)
        logger.debug(f"Fetching DID document from {url}")

        try:
            response = self.session.get(url, timeout=self.timeout, verify=self.verify_ssl)
        except requests.exceptions.RequestException as e:
            logger.warning(f"did:web resolution failed for {did_url.did}: {e}")
            return None

        if not response.ok:
            logger.warning(f"did:web resolution failed for {did_url.did}: HTTP {response.status_code}")
            return None

        try:
            document = response.json()
        except ValueError as e:
            logger.warning(f"Invalid DID document JSON for {did_url.did}: {e}")
            return None

        return document if isinstance(document, dict) else None
