"""
User storage port and password hashing helpers.

Passwords are hashed with PBKDF2-HMAC-SHA256 and a random 16 byte salt.
"""

import hashlib
import secrets
from abc import ABC
from typing import Optional

from ..errors import ServerError
from ..models import User
from ..util.encoding import base64_decode, base64_encode, secure_compare

PASSWORD_HASH_ALGORITHM = 'sha256'
PASSWORD_HASH_ITERATIONS = 100_000
SALT_SIZE = 16


def generate_salt() -> str:
    """Generate a random base64 encoded salt."""
    return base64_encode(secrets.token_bytes(SALT_SIZE))


def hash_password(password: str, salt: str,
                  iterations: int = PASSWORD_HASH_ITERATIONS) -> str:
    """Hash a password with a base64 encoded salt, returning the base64 encoded hash."""
    digest = hashlib.pbkdf2_hmac(
        PASSWORD_HASH_ALGORITHM,
        password.encode('utf-8'),
        base64_decode(salt),
        iterations,
    )
    return base64_encode(digest)


def verify_password(password: str, salt: str, password_hash: str,
                    iterations: int = PASSWORD_HASH_ITERATIONS) -> bool:
    """Check a password against a stored hash in constant time."""
    return secure_compare(hash_password(password, salt, iterations), password_hash)


class UserService(ABC):
    """Authenticates resource owners for the password grant."""

    async def get_authenticated(self, username: str, password: str) -> Optional[User]:
        """Retrieve a user if the username and password are correct."""
        raise ServerError("user_service.get_authenticated not implemented")
