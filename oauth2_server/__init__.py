"""
oauth2_server: a framework-agnostic OAuth 2.0 authorization server engine.

Implements the token and authorize endpoints of RFC 6749, PKCE (RFC 7636) and
bearer token authentication for resource servers. HTTP frameworks plug in
through the request/response ports in ``oauth2_server.context`` and storage
plugs in through the services in ``oauth2_server.services``.
"""

__version__ = "0.1.0"

from .authorization_server import AuthorizationServer, TOKEN_RESPONSE_HEADERS
from .resource_server import ResourceServer, BEARER_TOKEN
from .config import ServerConfig, parse_duration_string
from .context import (
    Headers,
    OAuth2Request,
    OAuth2Response,
    FormRequest,
    SimpleResponse,
    AuthorizeParameters,
    authorize_parameters,
    authorize_url,
    login_redirect_factory,
)
from .basic_auth import BasicAuth, parse_basic_auth
from .pkce import CHALLENGE_METHODS, generate_code_verifier
from .models import (
    Scope,
    Client,
    User,
    AccessToken,
    Token,
    RefreshToken,
    AuthorizationCode,
)
from .grants import (
    Grant,
    AuthorizationCodeGrant,
    ClientCredentialsGrant,
    RefreshTokenGrant,
    PasswordGrant,
)
from .services import (
    ClientService,
    UserService,
    AuthorizationCodeService,
    AccessTokenService,
    RefreshTokenService,
    MemoryClientService,
    MemoryUserService,
    MemoryAuthorizationCodeService,
    MemoryTokenService,
)
from .errors import (
    OAuth2Error,
    InvalidRequest,
    InvalidClient,
    InvalidGrant,
    UnauthorizedClient,
    UnsupportedGrantType,
    UnsupportedResponseType,
    InvalidScope,
    AccessDenied,
    ServerError,
    TemporarilyUnavailable,
)

__all__ = [
    '__version__',
    'AuthorizationServer',
    'TOKEN_RESPONSE_HEADERS',
    'ResourceServer',
    'BEARER_TOKEN',
    'ServerConfig',
    'parse_duration_string',
    'Headers',
    'OAuth2Request',
    'OAuth2Response',
    'FormRequest',
    'SimpleResponse',
    'AuthorizeParameters',
    'authorize_parameters',
    'authorize_url',
    'login_redirect_factory',
    'BasicAuth',
    'parse_basic_auth',
    'CHALLENGE_METHODS',
    'generate_code_verifier',
    'Scope',
    'Client',
    'User',
    'AccessToken',
    'Token',
    'RefreshToken',
    'AuthorizationCode',
    'Grant',
    'AuthorizationCodeGrant',
    'ClientCredentialsGrant',
    'RefreshTokenGrant',
    'PasswordGrant',
    'ClientService',
    'UserService',
    'AuthorizationCodeService',
    'AccessTokenService',
    'RefreshTokenService',
    'MemoryClientService',
    'MemoryUserService',
    'MemoryAuthorizationCodeService',
    'MemoryTokenService',
    'OAuth2Error',
    'InvalidRequest',
    'InvalidClient',
    'InvalidGrant',
    'UnauthorizedClient',
    'UnsupportedGrantType',
    'UnsupportedResponseType',
    'InvalidScope',
    'AccessDenied',
    'ServerError',
    'TemporarilyUnavailable',
]
