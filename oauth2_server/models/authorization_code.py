"""
Authorization code model.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .client import Client
from .scope import Scope
from .user import User
from ..common import get_current_time


@dataclass
class AuthorizationCode:
    """
    An authorization code issued by the authorize endpoint.

    The code is single use: the authorization code grant revokes it before
    exchanging it for a token.
    """

    code: str
    expires_at: datetime
    client: Client
    user: User
    scope: Optional[Scope] = None
    redirect_uri: Optional[str] = None
    # PKCE, RFC 7636
    challenge: Optional[str] = None
    challenge_method: Optional[str] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check if the code is past its expiry."""
        return self.expires_at < (now or get_current_time())
