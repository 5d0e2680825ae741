"""
The refresh token grant type.

https://datatracker.ietf.org/doc/html/rfc6749.html#section-6
"""

import logging

from ..context import OAuth2Request
from ..errors import InvalidClient, InvalidGrant, InvalidRequest
from ..models import Client, Token
from .grant import Grant

logger = logging.getLogger(__name__)


class RefreshTokenGrant(Grant):
    """
    Exchanges a refresh token for a new token.

    The token being refreshed is revoked, so only one token of a refresh
    lineage is live at a time.
    """

    grant_type = "refresh_token"
    allow_refresh_token = True

    async def token(self, request: OAuth2Request, client: Client) -> Token:
        if not request.has_body:
            raise InvalidRequest("request body required")

        body = await request.body() or {}
        refresh_token = body.get("refresh_token")
        if not refresh_token:
            raise InvalidRequest("refresh_token parameter required")

        current_token = await self.token_service.get_refresh_token(refresh_token)
        if not current_token or current_token.is_refresh_token_expired():
            raise InvalidGrant("invalid refresh_token")

        if client.id != current_token.client.id:
            raise InvalidClient("refresh_token was issued to another client")

        next_token = await self.generate_token(client, current_token.user, current_token.scope)
        if not next_token.refresh_token:
            next_token.refresh_token = current_token.refresh_token
            if current_token.refresh_token_expires_at:
                next_token.refresh_token_expires_at = current_token.refresh_token_expires_at
        if current_token.code:
            next_token.code = current_token.code

        await self.token_service.revoke(current_token)
        logger.debug(f"Refreshed token for client {client.id}")
        return await self.token_service.save(next_token)
