"""
Storage ports and their in-memory implementations.
"""

from .client import ClientService
from .user import UserService, generate_salt, hash_password, verify_password
from .authorization_code import AuthorizationCodeService
from .token import AccessTokenService, RefreshTokenService, AcceptedScope
from .memory import (
    MemoryClientService,
    MemoryUserService,
    MemoryAuthorizationCodeService,
    MemoryTokenService,
)

__all__ = [
    'ClientService',
    'UserService',
    'generate_salt',
    'hash_password',
    'verify_password',
    'AuthorizationCodeService',
    'AccessTokenService',
    'RefreshTokenService',
    'AcceptedScope',
    'MemoryClientService',
    'MemoryUserService',
    'MemoryAuthorizationCodeService',
    'MemoryTokenService',
]
