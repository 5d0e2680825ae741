"""
Authorization code storage port.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, Union

from ..common import expires_after, generate_id
from ..config import DEFAULT_AUTHORIZATION_CODE_LIFETIME
from ..models import AuthorizationCode, Client, Scope, User


class AuthorizationCodeService(ABC):
    """Issues and stores authorization codes."""

    # seconds
    lifetime: int = DEFAULT_AUTHORIZATION_CODE_LIFETIME

    async def generate_code(self, client: Client, user: User,
                            scope: Optional[Scope] = None) -> str:
        """Generate an authorization code. Defaults to a version 4 UUID."""
        return generate_id()

    async def expires_at(self, client: Client, user: User,
                         scope: Optional[Scope] = None) -> datetime:
        """Get the time a new authorization code would expire at."""
        return expires_after(self.lifetime)

    @abstractmethod
    async def get(self, code: str) -> Optional[AuthorizationCode]:
        """Retrieve an authorization code."""
        pass

    @abstractmethod
    async def save(self, authorization_code: AuthorizationCode) -> AuthorizationCode:
        """Save an authorization code."""
        pass

    @abstractmethod
    async def revoke(self, authorization_code: Union[AuthorizationCode, str]) -> bool:
        """Revoke an authorization code. Returns True if a code was revoked."""
        pass
