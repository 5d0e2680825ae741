"""
Token storage ports.

``AccessTokenService`` issues access tokens only; the refresh token hooks
raise ``ServerError`` until implemented. ``RefreshTokenService`` issues
refresh tokens too.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Literal, Optional, Union

from ..common import expires_after, generate_id
from ..config import DEFAULT_ACCESS_TOKEN_LIFETIME, DEFAULT_REFRESH_TOKEN_LIFETIME
from ..errors import ServerError
from ..models import AccessToken, Client, RefreshToken, Scope, Token, User

# False rejects the requested scope, None means the token has no scope.
AcceptedScope = Union[Scope, None, Literal[False]]


class AccessTokenService(ABC):
    """Issues, stores and revokes tokens."""

    # seconds
    access_token_lifetime: int = DEFAULT_ACCESS_TOKEN_LIFETIME
    refresh_token_lifetime: int = 0

    async def accepted_scope(self, client: Client, user: User,
                             scope: Optional[Scope] = None) -> AcceptedScope:
        """
        Get the scope a token may be issued with.

        Returns the requested scope by default. Return a narrower scope to
        grant less than requested, ``None`` for no scope, or ``False`` to
        reject the request.
        """
        return scope

    async def generate_access_token(self, client: Client, user: User,
                                    scope: Optional[Scope] = None) -> str:
        """Generate an access token. Defaults to a version 4 UUID."""
        return generate_id()

    async def generate_refresh_token(self, client: Client, user: User,
                                     scope: Optional[Scope] = None) -> Optional[str]:
        """Generate a refresh token."""
        raise ServerError("generate_refresh_token not implemented")

    async def access_token_expires_at(self, client: Client, user: User,
                                      scope: Optional[Scope] = None) -> Optional[datetime]:
        """Get the time a new access token would expire at."""
        lifetime = client.access_token_lifetime
        if lifetime is None:
            lifetime = self.access_token_lifetime
        return expires_after(lifetime)

    async def refresh_token_expires_at(self, client: Client, user: User,
                                       scope: Optional[Scope] = None) -> Optional[datetime]:
        """Get the time a new refresh token would expire at."""
        raise ServerError("refresh_token_expires_at not implemented")

    @abstractmethod
    async def get_token(self, access_token: str) -> Optional[AccessToken]:
        """Retrieve a token by its access token."""
        pass

    async def get_refresh_token(self, refresh_token: str) -> Optional[RefreshToken]:
        """Retrieve a token by its refresh token."""
        raise ServerError("get_refresh_token not implemented")

    @abstractmethod
    async def save(self, token: Token) -> Token:
        """Save a token."""
        pass

    @abstractmethod
    async def revoke(self, token: Union[Token, str]) -> bool:
        """Revoke a token. Returns True if a token was revoked."""
        pass

    @abstractmethod
    async def revoke_code(self, code: str) -> bool:
        """Revoke every token issued for an authorization code. Returns True if any was revoked."""
        pass


class RefreshTokenService(AccessTokenService):
    """A token service that issues refresh tokens."""

    refresh_token_lifetime: int = DEFAULT_REFRESH_TOKEN_LIFETIME

    async def generate_refresh_token(self, client: Client, user: User,
                                     scope: Optional[Scope] = None) -> Optional[str]:
        """Generate a refresh token. Defaults to a version 4 UUID."""
        return generate_id()

    async def refresh_token_expires_at(self, client: Client, user: User,
                                       scope: Optional[Scope] = None) -> Optional[datetime]:
        lifetime = client.refresh_token_lifetime
        if lifetime is None:
            lifetime = self.refresh_token_lifetime
        return expires_after(lifetime)

    @abstractmethod
    async def get_refresh_token(self, refresh_token: str) -> Optional[RefreshToken]:
        pass
