"""
Authorization server.

Adds the token endpoint and the authorize endpoint to the resource server.
https://datatracker.ietf.org/doc/html/rfc6749
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, Mapping, Optional, Type, Union

from .config import ServerConfig
from .context import (
    FORM_CONTENT_TYPE, LoginCallback, OAuth2Request, OAuth2Response,
    authorize_parameters, login_redirect_factory, media_type, set_query_params,
)
from .errors import (
    AccessDenied, InvalidRequest, OAuth2Error, ServerError, UnauthorizedClient,
    UnsupportedGrantType, UnsupportedResponseType, wrap_exception,
)
from .grants import AuthorizationCodeGrant, Grant
from .models import Scope, Token
from .resource_server import ResourceServer
from .services import AccessTokenService
from .util.encoding import mask_sensitive_data

logger = logging.getLogger(__name__)

# Looks up the session of an authorize request and sets request.user and
# request.authorized_scope when there is one.
SetAuthorization = Callable[[OAuth2Request], Awaitable[None]]
ConsentCallback = LoginCallback

TOKEN_RESPONSE_HEADERS = {
    "Content-Type": "application/json;charset=UTF-8",
    "Cache-Control": "no-store",
    "Pragma": "no-cache",
}


class AuthorizationServer(ResourceServer):
    """
    An OAuth2 authorization server.

    ``grants`` maps grant type names to grants. An iterable of grants is keyed
    by each grant's ``grant_type``.
    """

    def __init__(
        self,
        grants: Union[Mapping[str, Grant], Iterable[Grant]],
        token_service: Optional[AccessTokenService] = None,
        scope_class: Type[Scope] = Scope,
        realm: Optional[str] = None,
        config: Optional[ServerConfig] = None,
    ):
        super().__init__(token_service, scope_class=scope_class, realm=realm, config=config)
        if isinstance(grants, Mapping):
            self.grants: Dict[str, Grant] = dict(grants)
        else:
            self.grants = {grant.grant_type: grant for grant in grants}

    async def token(self, request: OAuth2Request, response: OAuth2Response) -> None:
        """Handle a token request."""
        try:
            if request.method != "POST":
                raise InvalidRequest("method must be POST")

            if media_type(request.headers.get("content-type")) != FORM_CONTENT_TYPE:
                raise InvalidRequest(f"content-type header must be {FORM_CONTENT_TYPE}")

            if not request.has_body:
                raise InvalidRequest("request body required")

            body = await request.body() or {}
            grant_type = body.get("grant_type")
            if not grant_type:
                raise InvalidRequest("grant_type parameter required")
            grant = self.grants.get(grant_type)
            if grant is None:
                raise UnsupportedGrantType("invalid grant_type")

            client = await grant.get_authenticated_client(request)
            if not client.allows_grant(grant_type):
                raise UnauthorizedClient("client is not authorized to use this grant_type")

            request.token = await grant.token(request, client)
            logger.info(f"Issued token via {grant_type} to client {client.id}")
            await self.token_success(request, response)
        except Exception as e:
            await self.token_error(request, response, e)

    def bearer_token(self, token: Token) -> Dict[str, Any]:
        """Generate the bearer token response body for a token."""
        bearer_token = {
            "token_type": "Bearer",
            "access_token": token.access_token,
        }
        expires_in = token.expires_in()
        if expires_in is not None:
            bearer_token["expires_in"] = expires_in
        if getattr(token, "refresh_token", None):
            bearer_token["refresh_token"] = token.refresh_token
        if token.scope is not None:
            bearer_token["scope"] = token.scope.to_json()
        return bearer_token

    async def token_response(self, request: OAuth2Request, response: OAuth2Response) -> None:
        """Add headers to a token response."""
        for name, value in TOKEN_RESPONSE_HEADERS.items():
            response.headers[name] = value

    async def token_success(self, request: OAuth2Request, response: OAuth2Response) -> None:
        await self.token_response(request, response)
        response.status = 200
        response.body = self.bearer_token(request.token)

    async def token_error(self, request: OAuth2Request, response: OAuth2Response,
                          error: BaseException) -> None:
        logger.warning(f"Token request failed: {error!r}")
        await self.token_response(request, response)
        await self.error_handler(request, response, error)

    async def authorize(
        self,
        request: OAuth2Request,
        response: OAuth2Response,
        set_authorization: SetAuthorization,
        login: Optional[LoginCallback] = None,
        consent: Optional[ConsentCallback] = None,
    ) -> None:
        """
        Handle an authorization request of the authorization code grant.

        ``set_authorization`` looks up the user's session. Without a user,
        ``login`` is called to send the user to a login page; it defaults to a
        redirect to the configured ``login_url``. With a user that has not
        authorized the requested scope, ``consent`` is called.
        """
        try:
            request.authorize_parameters = await authorize_parameters(request)
            params = request.authorize_parameters

            grant = self.grants.get("authorization_code")
            if not isinstance(grant, AuthorizationCodeGrant):
                raise ServerError("missing authorization code grant")

            if not params.client_id:
                raise InvalidRequest("client_id parameter required")

            client = await grant.get_client(params.client_id)
            if not client.allows_grant("authorization_code"):
                raise UnauthorizedClient(
                    "client is not authorized to use the authorization code grant type")
            if not client.redirect_uris:
                raise UnauthorizedClient("no authorized redirect_uri")
            if params.redirect_uri and not client.allows_redirect_uri(params.redirect_uri):
                raise UnauthorizedClient("redirect_uri not authorized")

            # errors are reported to the redirect uri from here on
            request.redirect_url = params.redirect_uri or client.redirect_uris[0]

            if not params.state:
                raise InvalidRequest("state required")
            request.redirect_url = set_query_params(request.redirect_url, {"state": params.state})

            if not params.response_type:
                raise InvalidRequest("response_type required")
            if params.response_type != "code":
                raise UnsupportedResponseType("response_type not supported")

            scope = grant.parse_scope(params.scope)
            request.requested_scope = scope

            if params.challenge_method and not params.challenge:
                raise InvalidRequest("code_challenge required when code_challenge_method is set")
            if params.challenge and not grant.validate_challenge_method(params.challenge_method):
                raise InvalidRequest("unsupported code_challenge_method")

            await set_authorization(request)
            user = request.user
            if user is None:
                raise AccessDenied("authentication required")

            scope = await grant.accepted_scope(client, user, scope)
            authorized_scope = request.authorized_scope
            if scope is not None and (authorized_scope is None or not authorized_scope.has(scope)):
                raise AccessDenied("not authorized")

            authorization_code = await grant.generate_authorization_code(
                client,
                user,
                scope=scope,
                redirect_uri=params.redirect_uri,
                challenge=params.challenge,
                challenge_method=params.challenge_method,
            )
            request.authorization_code = authorization_code
            request.redirect_url = set_query_params(
                request.redirect_url, {"code": authorization_code.code})
            logger.info(
                f"Issued authorization code {mask_sensitive_data(authorization_code.code)} "
                f"to client {client.id}"
            )
            await self.authorize_success(request, response)
        except Exception as e:
            await self.authorize_error(request, response, e, login, consent)

    async def authorize_success(self, request: OAuth2Request, response: OAuth2Response) -> None:
        await response.redirect(request.redirect_url)

    async def authorize_error(
        self,
        request: OAuth2Request,
        response: OAuth2Response,
        error: BaseException,
        login: Optional[LoginCallback] = None,
        consent: Optional[ConsentCallback] = None,
    ) -> None:
        """
        Handle a failed authorization request.

        Access denied errors are handed to ``login`` or ``consent``. Anything
        else, including a failure of those callbacks, is reported to the
        redirect uri when there is one and as a JSON error otherwise.
        """
        if login is None and self.config.login_url:
            login = login_redirect_factory(self.config.login_url)

        if request.authorize_parameters is not None and getattr(error, "code", None) == "access_denied":
            callback = login if request.user is None else consent
            if callback is not None:
                try:
                    await callback(request, response)
                    return
                except Exception as e:
                    if isinstance(e, OAuth2Error):
                        e.cause = error
                    e.__cause__ = error
                    error = e

        e = wrap_exception(error)
        logger.warning(f"Authorization request failed: {e!r}")
        if request.redirect_url:
            request.redirect_url = set_query_params(request.redirect_url, {
                "error": e.code or "server_error",
                "error_description": e.message or None,
                "error_uri": e.uri,
            })
            await response.redirect(request.redirect_url)
        else:
            await self.error_handler(request, response, e)
