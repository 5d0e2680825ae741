"""
Resource server.

Authenticates requests to protected resources with bearer tokens.
https://datatracker.ietf.org/doc/html/rfc6750
"""

import logging
import re
from typing import Any, Awaitable, Callable, Optional, Type

from .config import ServerConfig
from .context import FORM_CONTENT_TYPE, OAuth2Request, OAuth2Response, media_type
from .errors import AccessDenied, OAuth2Error, ServerError, wrap_exception
from .models import Scope, ScopeLike, Token
from .services import AccessTokenService
from .util.encoding import mask_sensitive_data

logger = logging.getLogger(__name__)

BEARER_TOKEN = re.compile(r"^ *(?:[Bb][Ee][Aa][Rr][Ee][Rr]) +([\w\-.~+/]+=*) *$")

# Gets an access token for a request. require_refresh asks the source for a
# fresh token after the previous one was rejected.
AccessTokenGetter = Callable[[OAuth2Request, bool], Awaitable[Optional[str]]]
Next = Callable[[], Awaitable[Any]]


class ResourceServer:
    """Authenticates requests with access tokens issued by an authorization server."""

    def __init__(
        self,
        token_service: Optional[AccessTokenService] = None,
        scope_class: Type[Scope] = Scope,
        realm: Optional[str] = None,
        config: Optional[ServerConfig] = None,
    ):
        self.config = config or ServerConfig()
        self.token_service = token_service
        self.scope_class = scope_class
        self.realm = realm or self.config.realm

    async def error_handler(self, request: OAuth2Request, response: OAuth2Response,
                            error: BaseException) -> None:
        """Write an error response."""
        e = wrap_exception(error)
        response.status = e.status
        if e.status == 401 and "authorization" in request.headers:
            response.headers["WWW-Authenticate"] = f'Basic realm="{self.realm}"'
        response.body = e.to_dict()

    async def get_access_token(self, request: OAuth2Request) -> Optional[str]:
        """Get an access token from the authorization header or a form body."""
        access_token = None
        authorization = request.headers.get("authorization")
        if authorization:
            match = BEARER_TOKEN.match(authorization)
            if match:
                access_token = match.group(1)

        if not access_token:
            content_type = media_type(request.headers.get("content-type"))
            if request.method == "POST" and content_type == FORM_CONTENT_TYPE:
                body = await request.body() or {}
                access_token = body.get("access_token") or None
        return access_token

    async def get_token(self, access_token: str) -> Token:
        """Get the token for an access token, raising AccessDenied if it is invalid."""
        if self.token_service is None:
            raise ServerError("token service required")
        token = await self.token_service.get_token(access_token)
        if not token or token.is_access_token_expired():
            raise AccessDenied("invalid access_token")
        return token

    async def get_token_for_request(
        self,
        request: OAuth2Request,
        get_access_token: Optional[AccessTokenGetter] = None,
    ) -> Token:
        """
        Get the token for a request and record it on the request.

        The token is only resolved once per request. A rejected access token
        from ``get_access_token`` is retried once with ``require_refresh``.
        Without an access token from ``get_access_token`` the authorization
        header or form body is used instead.
        """
        token = request.token
        access_token = request.access_token
        if not request.token_resolved:
            request.token_resolved = True
            request.token = None
            request.access_token = None
            token = None

            access_token = None
            if get_access_token is not None:
                access_token = await get_access_token(request, False)
                request.access_token = access_token
                if access_token:
                    try:
                        token = await self.get_token(access_token)
                    except OAuth2Error as e:
                        if e.code != "access_denied":
                            raise
                        logger.debug("Access token rejected, requesting a refreshed one")
                        access_token = await get_access_token(request, True)
                        request.access_token = access_token

            if not access_token:
                access_token = await self.get_access_token(request)
                request.access_token = access_token
            if not token and access_token:
                token = await self.get_token(access_token)
            request.token = token

        if not token:
            raise AccessDenied("invalid access_token" if access_token else "authentication required")
        return token

    async def authenticate(
        self,
        request: OAuth2Request,
        response: OAuth2Response,
        next: Next,
        get_access_token: Optional[AccessTokenGetter] = None,
        accepted_scope: Optional[ScopeLike] = None,
    ) -> None:
        """
        Authenticate a request and check that its token has the accepted scope.

        Calls ``next`` when the request is authenticated and writes an error
        response otherwise.
        """
        try:
            if accepted_scope is not None:
                request.accepted_scope = self.scope_class.from_scope(accepted_scope)

            token = await self.get_token_for_request(request, get_access_token)
            if request.accepted_scope is not None and (
                    token.scope is None or not token.scope.has(request.accepted_scope)):
                raise AccessDenied("insufficient scope")
            await self.authenticate_success(request, response, next)
        except Exception as e:
            await self.authenticate_error(request, response, e)

    async def authenticate_response(self, request: OAuth2Request, response: OAuth2Response) -> None:
        """Add the scope headers to an authentication response."""
        token = request.token
        accepted_scope = request.accepted_scope
        response.headers["X-OAuth-Scopes"] = str(token.scope) if token and token.scope is not None else ""
        response.headers["X-Accepted-OAuth-Scopes"] = str(accepted_scope) if accepted_scope is not None else ""

    async def authenticate_success(self, request: OAuth2Request, response: OAuth2Response,
                                   next: Next) -> None:
        await self.authenticate_response(request, response)
        await next()

    async def authenticate_error(self, request: OAuth2Request, response: OAuth2Response,
                                 error: BaseException) -> None:
        access_token = request.access_token
        logger.warning(
            f"Authentication failed for token {mask_sensitive_data(access_token)}: {error}"
        )
        await self.authenticate_response(request, response)
        await self.error_handler(request, response, error)
