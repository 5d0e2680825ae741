"""
Value types shared by grants, services and servers.
"""

from .scope import Scope, ScopeLike, SCOPE, SCOPE_TOKEN, NQCHAR, NQSCHAR, VSCHAR
from .client import Client
from .user import User
from .token import AccessToken, Token, RefreshToken
from .authorization_code import AuthorizationCode

__all__ = [
    'Scope',
    'ScopeLike',
    'SCOPE',
    'SCOPE_TOKEN',
    'NQCHAR',
    'NQSCHAR',
    'VSCHAR',
    'Client',
    'User',
    'AccessToken',
    'Token',
    'RefreshToken',
    'AuthorizationCode',
]
