"""
Grant types of the token endpoint.
"""

from .grant import Grant, ClientCredentials
from .authorization_code import AuthorizationCodeGrant, PKCEClientCredentials
from .client_credentials import ClientCredentialsGrant
from .refresh_token import RefreshTokenGrant
from .password import PasswordGrant

__all__ = [
    'Grant',
    'ClientCredentials',
    'AuthorizationCodeGrant',
    'PKCEClientCredentials',
    'ClientCredentialsGrant',
    'RefreshTokenGrant',
    'PasswordGrant',
]
