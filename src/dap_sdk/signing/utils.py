"""
Utility functions for signing and verification
"""

from typing import Any


async def maybe_await(result: Any) -> Any:
    """
    Return ``result``, awaiting it first if it is awaitable.

    Signers and key resolvers may be implemented synchronously or
    asynchronously; callers treat both the same way.
    """
    if hasattr(result, '__await__'):
        return await result
    return result
