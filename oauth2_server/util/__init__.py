"""
Utility helpers shared by the OAuth2 engine.

This package includes:
- Encoding helpers for base64 and base64url data
- Constant-time string comparison
- Masking of secrets before they reach the logs
"""

from .encoding import (
    base64_encode,
    base64_decode,
    url_safe_encode,
    url_safe_decode,
    secure_compare,
    mask_sensitive_data,
)

__all__ = [
    'base64_encode', 'base64_decode', 'url_safe_encode', 'url_safe_decode',
    'secure_compare', 'mask_sensitive_data',
]
