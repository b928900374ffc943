"""
Encoding helpers shared by the crypto, signing and verification modules
"""

import base64
import json
from typing import Any, Dict, Union


def to_base64url(data: Union[bytes, str]) -> str:
    """
    Base64url-encode data without padding (RFC 7515 Appendix C).

    Args:
        data: Bytes, or a string which is UTF-8 encoded first

    Returns:
        str: Unpadded base64url text
    """
    if isinstance(data, str):
        data = data.encode('utf-8')
    return base64.urlsafe_b64encode(data).rstrip(b'=').decode('ascii')


def from_base64url(data: str) -> bytes:
    """
    Decode unpadded base64url text.

    Raises:
        ValueError: If ``data`` is not valid base64url
    """
    if not isinstance(data, str):
        raise ValueError("Base64url input must be a string")

    padded = data + '=' * (-len(data) % 4)
    return base64.b64decode(padded.encode('ascii'), altchars=b'-_', validate=True)


def object_to_base64url(obj: Dict[str, Any]) -> str:
    """Serialize a JSON object compactly and base64url-encode it."""
    return to_base64url(json.dumps(obj, separators=(',', ':'), ensure_ascii=False))


def base64url_to_object(data: str) -> Dict[str, Any]:
    """
    Decode base64url text holding a JSON object.

    Raises:
        ValueError: If the text is not base64url, not UTF-8 JSON, nested too
            deeply to decode, or not an object
    """
    text = from_base64url(data).decode('utf-8')
    try:
        obj = json.loads(text)
    except RecursionError as e:
        raise ValueError("JSON is nested too deeply") from e
    if not isinstance(obj, dict):
        raise ValueError("Expected a JSON object")
    return obj

