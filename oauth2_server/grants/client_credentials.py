"""
The client credentials grant type.

https://datatracker.ietf.org/doc/html/rfc6749.html#section-4.4
"""

from ..context import OAuth2Request
from ..errors import InvalidGrant, InvalidRequest
from ..models import Client, Token
from .grant import Grant


class ClientCredentialsGrant(Grant):
    """Issues tokens to a client acting on behalf of its own user."""

    grant_type = "client_credentials"
    allow_refresh_token = False

    async def token(self, request: OAuth2Request, client: Client) -> Token:
        if not request.has_body:
            raise InvalidRequest("request body required")

        body = await request.body() or {}
        scope = self.parse_scope(body.get("scope"))

        user = await self.client_service.get_user(client)
        if user is None:
            raise InvalidGrant("no user for client")

        scope = await self.accepted_scope(client, user, scope)

        token = await self.generate_token(client, user, scope)
        return await self.token_service.save(token)
