"""
Base class for grant types.

A grant authenticates the client of a token request and exchanges the
request for a token.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Type

from ..basic_auth import parse_basic_auth
from ..context import OAuth2Request
from ..errors import InvalidClient, InvalidScope
from ..models import Client, Scope, Token, User
from ..services import AccessTokenService, ClientService

logger = logging.getLogger(__name__)


@dataclass
class ClientCredentials:
    """Credentials a client presented with a token request."""
    client_id: str
    client_secret: Optional[str] = None


class Grant(ABC):
    """
    A grant type of the token endpoint.

    ``scope_class`` is the scope type requested scopes are parsed into; it
    must implement the ``Scope`` interface.
    """

    grant_type: str = ""
    allow_refresh_token: bool = True

    def __init__(
        self,
        client_service: ClientService,
        token_service: AccessTokenService,
        scope_class: Type[Scope] = Scope,
        allow_refresh_token: Optional[bool] = None,
    ):
        self.client_service = client_service
        self.token_service = token_service
        self.scope_class = scope_class
        if allow_refresh_token is not None:
            self.allow_refresh_token = allow_refresh_token

    def parse_scope(self, scope_text: Optional[str]) -> Optional[Scope]:
        """Parse a scope string. No scope text means no scope, not an empty scope."""
        return self.scope_class(scope_text) if scope_text else None

    async def accepted_scope(self, client: Client, user: User,
                             scope: Optional[Scope] = None) -> Optional[Scope]:
        """Get the scope the token service accepts, raising InvalidScope if it rejects it."""
        accepted = await self.token_service.accepted_scope(client, user, scope)
        if accepted is False:
            logger.warning(f"Scope {scope} rejected for client {client.id}")
            raise InvalidScope("invalid scope" if scope is not None else "scope required")
        return accepted

    async def get_client_credentials(self, request: OAuth2Request) -> ClientCredentials:
        """
        Get the client credentials of a request.

        Clients should authenticate with HTTP Basic. Credentials in the request
        body are only used when there is no authorization header at all.
        https://datatracker.ietf.org/doc/html/rfc6749.html#section-2.3.1
        """
        authorization = request.headers.get("authorization")
        if authorization is None and request.has_body:
            body = await request.body() or {}
            client_id = body.get("client_id")
            if client_id:
                return ClientCredentials(client_id, body.get("client_secret") or None)

        credentials = parse_basic_auth(authorization)
        return ClientCredentials(credentials.name, credentials.password or None)

    async def get_authenticated_client(self, request: OAuth2Request) -> Client:
        """Authenticate the client of a request."""
        credentials = await self.get_client_credentials(request)
        if credentials.client_secret:
            client = await self.client_service.get_authenticated(
                credentials.client_id, credentials.client_secret)
        else:
            client = await self.client_service.get_authenticated(credentials.client_id)
        if not client:
            logger.warning(f"Client authentication failed for client {credentials.client_id}")
            raise InvalidClient("client authentication failed")
        return client

    async def generate_token(self, client: Client, user: User,
                             scope: Optional[Scope] = None) -> Token:
        """Generate a token, with a refresh token when this grant allows one."""
        token_service = self.token_service
        token = Token(
            access_token=await token_service.generate_access_token(client, user, scope),
            client=client,
            user=user,
        )
        token.access_token_expires_at = await token_service.access_token_expires_at(
            client, user, scope)

        if self.allow_refresh_token:
            refresh_token = await token_service.generate_refresh_token(client, user, scope)
            if refresh_token:
                token.refresh_token = refresh_token
                token.refresh_token_expires_at = await token_service.refresh_token_expires_at(
                    client, user, scope)

        if scope is not None:
            token.scope = scope
        return token

    @abstractmethod
    async def token(self, request: OAuth2Request, client: Client) -> Token:
        """Exchange a token request for a saved token."""
        pass
