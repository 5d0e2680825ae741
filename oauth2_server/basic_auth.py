"""
HTTP Basic authentication header parsing for client authentication.

https://datatracker.ietf.org/doc/html/rfc7617
"""

import re
from dataclasses import dataclass
from typing import Optional

from .errors import InvalidClient
from .util.encoding import base64_decode

CREDENTIALS = re.compile(r"^ *(?:[Bb][Aa][Ss][Ii][Cc]) +([\w\-.~+/]+=*) *$")
NAME_PASS = re.compile(r"^([^:]+):(.*)$", re.DOTALL)


@dataclass
class BasicAuth:
    """Credentials from a basic authorization header."""
    name: str
    password: str


def parse_basic_auth(authorization: Optional[str]) -> BasicAuth:
    """Parse a basic authorization header, raising InvalidClient when malformed."""
    if not authorization:
        raise InvalidClient("authorization header required")

    match = CREDENTIALS.match(authorization)
    if not match:
        raise InvalidClient("unsupported authorization header")

    try:
        value = base64_decode(match.group(1)).decode('utf-8')
    except (ValueError, UnicodeDecodeError):
        raise InvalidClient("authorization header is not correctly encoded")

    match = NAME_PASS.match(value)
    if not match:
        raise InvalidClient("authorization header is malformed")

    return BasicAuth(name=match.group(1), password=match.group(2))
