"""
The resource owner password credentials grant type.

https://datatracker.ietf.org/doc/html/rfc6749.html#section-4.3

Usage of this grant type is not recommended.
https://datatracker.ietf.org/doc/html/draft-ietf-oauth-security-topics#section-2.4
"""

import logging

from ..context import OAuth2Request
from ..errors import InvalidGrant, InvalidRequest
from ..models import Client, Token
from ..services import UserService
from .grant import Grant

logger = logging.getLogger(__name__)


class PasswordGrant(Grant):
    """Issues tokens for a username and password."""

    grant_type = "password"

    def __init__(self, client_service, token_service, user_service: UserService, **kwargs):
        super().__init__(client_service, token_service, **kwargs)
        self.user_service = user_service

    async def token(self, request: OAuth2Request, client: Client) -> Token:
        if not request.has_body:
            raise InvalidRequest("request body required")

        body = await request.body() or {}
        scope = self.parse_scope(body.get("scope"))

        username = body.get("username")
        if not username:
            raise InvalidRequest("username parameter required")
        password = body.get("password")
        if not password:
            raise InvalidRequest("password parameter required")

        user = await self.user_service.get_authenticated(username, password)
        if user is None:
            logger.warning(f"User authentication failed for {username}")
            raise InvalidGrant("user authentication failed")

        scope = await self.accepted_scope(client, user, scope)

        token = await self.generate_token(client, user, scope)
        return await self.token_service.save(token)
