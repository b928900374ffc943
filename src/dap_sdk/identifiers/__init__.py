"""
DAP Python SDK - Identifier Grammars

Value types for URNs, DAPs (``@handle/domain``) and time-ordered
registration IDs (``reg_<suffix>``).
"""

from .urn import Urn
from .dap import Dap
from .registration_id import RegistrationId

__all__ = [
    'Urn',
    'Dap',
    'RegistrationId',
]
