"""
Uniform Resource Names

A URN has the form ``urn:<nid>:<nss>``. The namespace identifier (nid) runs up
to the first ``:`` after the prefix; everything after that, further colons
included, is the namespace-specific string (nss).
"""

import re
from dataclasses import dataclass

from ..exceptions import InvalidUrnError, IdentifierErrorCodes

PREFIX = 'urn:'
SEPARATOR = ':'

URN_PATTERN = re.compile(f'{PREFIX}([^{SEPARATOR}]+){SEPARATOR}(.+)')


@dataclass(frozen=True)
class Urn:
    """
    A parsed URN.

    Attributes:
        nid: Namespace identifier (non-empty, no ':')
        nss: Namespace-specific string (non-empty, may contain ':')
    """
    nid: str
    nss: str

    def __str__(self) -> str:
        return f'{PREFIX}{self.nid}{SEPARATOR}{self.nss}'

    @classmethod
    def parse(cls, urn: str) -> 'Urn':
        """
        Parse a URN string.

        Args:
            urn: String of the form ``urn:<nid>:<nss>``

        Returns:
            Urn: The parsed URN; ``str()`` of it equals ``urn``

        Raises:
            InvalidUrnError: If ``urn`` does not match the URN grammar
        """
        if not isinstance(urn, str):
            raise InvalidUrnError("URN must be a string", IdentifierErrorCodes.INVALID_TYPE)

        match = URN_PATTERN.fullmatch(urn)
        if not match:
            raise _diagnose(urn)

        nid, nss = match.groups()
        return cls(nid, nss)


def _diagnose(urn: str) -> InvalidUrnError:
    if not urn.startswith(PREFIX):
        return InvalidUrnError(f"missing '{PREFIX}' prefix", IdentifierErrorCodes.MISSING_PREFIX,
                               {'urn': urn})

    body = urn[len(PREFIX):]
    if SEPARATOR not in body:
        return InvalidUrnError("missing separator between nid and nss",
                               IdentifierErrorCodes.MISSING_SEPARATOR, {'urn': urn})

    nid, _, nss = body.partition(SEPARATOR)
    if not nid:
        return InvalidUrnError("empty namespace identifier", IdentifierErrorCodes.EMPTY_SEGMENT,
                               {'urn': urn})
    if not nss:
        return InvalidUrnError("empty namespace-specific string", IdentifierErrorCodes.EMPTY_SEGMENT,
                               {'urn': urn})

    # Only a newline in the nss can still fail the pattern
    return InvalidUrnError("newline in namespace-specific string",
                           IdentifierErrorCodes.INVALID_CHARACTER, {'urn': urn})
