"""
Encoding and decoding utilities for the OAuth2 engine.
"""

import base64
import binascii
import hmac
from typing import Optional, Union


def base64_encode(data: Union[str, bytes]) -> str:
    """Encode data to base64 string."""
    if isinstance(data, str):
        data = data.encode('utf-8')

    return base64.b64encode(data).decode('ascii')


def base64_decode(encoded: str) -> bytes:
    """Decode a strictly valid base64 string to bytes."""
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 data: {e}")


def url_safe_encode(data: Union[str, bytes]) -> str:
    """Encode data to URL-safe base64 string without padding."""
    if isinstance(data, str):
        data = data.encode('utf-8')

    return base64.urlsafe_b64encode(data).decode('ascii').rstrip('=')


def url_safe_decode(encoded: str) -> bytes:
    """Decode URL-safe base64 string to bytes."""
    # Add padding if needed
    padding = 4 - (len(encoded) % 4)
    if padding != 4:
        encoded += '=' * padding

    try:
        return base64.urlsafe_b64decode(encoded)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid URL-safe base64 data: {e}")


def secure_compare(a: Optional[str], b: Optional[str]) -> bool:
    """
    Timing-safe string comparison to prevent timing attacks.
    """
    if not isinstance(a, str) or not isinstance(b, str):
        return False

    return hmac.compare_digest(a.encode('utf-8'), b.encode('utf-8'))


def mask_sensitive_data(data: Optional[str], mask_char: str = '*',
                        show_first: int = 4, show_last: int = 0) -> str:
    """
    Mask sensitive data leaving only first and last characters visible.
    """
    if not isinstance(data, str) or len(data) <= (show_first + show_last):
        return mask_char * len(data) if data else ""

    first_part = data[:show_first]
    last_part = data[-show_last:] if show_last > 0 else ""
    middle_length = len(data) - show_first - show_last

    return first_part + (mask_char * middle_length) + last_part
