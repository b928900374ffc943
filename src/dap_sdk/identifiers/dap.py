"""
Decentralized Agnostic Paytags (DAPs)

A DAP is a human-friendly identifier of the form ``@handle/domain`` used for
sending and receiving money across different platforms.
"""

import re
from dataclasses import dataclass

from ..exceptions import InvalidDapError, IdentifierErrorCodes

PREFIX = '@'
SEPARATOR = '/'

DAP_PATTERN = re.compile(f'{PREFIX}([^{PREFIX}{SEPARATOR}]+){SEPARATOR}([^{PREFIX}{SEPARATOR}]+)')


@dataclass(frozen=True)
class Dap:
    """
    A parsed DAP.

    Attributes:
        handle: The local handle part of the DAP
        domain: The domain part of the DAP
    """
    handle: str
    domain: str

    def __str__(self) -> str:
        return f'{PREFIX}{self.handle}{SEPARATOR}{self.domain}'

    @classmethod
    def parse(cls, dap: str) -> 'Dap':
        """
        Parse a DAP string.

        Args:
            dap: String of the form ``@handle/domain``

        Returns:
            Dap: The parsed DAP

        Raises:
            InvalidDapError: If ``dap`` does not match the DAP grammar
        """
        if not isinstance(dap, str):
            raise InvalidDapError("DAP must be a string", IdentifierErrorCodes.INVALID_TYPE)

        match = DAP_PATTERN.fullmatch(dap)
        if not match:
            raise _diagnose(dap)

        handle, domain = match.groups()
        return cls(handle, domain)


def _diagnose(dap: str) -> InvalidDapError:
    if not dap.startswith(PREFIX):
        return InvalidDapError(f"missing '{PREFIX}' prefix", IdentifierErrorCodes.MISSING_PREFIX,
                               {'dap': dap})

    body = dap[len(PREFIX):]
    if SEPARATOR not in body:
        return InvalidDapError(f"missing '{SEPARATOR}' separator", IdentifierErrorCodes.MISSING_SEPARATOR,
                               {'dap': dap})

    handle, _, domain = body.partition(SEPARATOR)
    if not handle or not domain:
        return InvalidDapError("handle and domain must not be empty", IdentifierErrorCodes.EMPTY_SEGMENT,
                               {'dap': dap})

    return InvalidDapError(
        f"handle and domain must not contain '{PREFIX}' or '{SEPARATOR}'",
        IdentifierErrorCodes.UNEXPECTED_CHARACTER,
        {'dap': dap}
    )
