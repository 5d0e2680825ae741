"""
Token models.

``AccessToken`` is what a resource server needs; ``Token`` adds the optional
refresh token issued alongside it and ``RefreshToken`` is a token known to
carry one.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from .client import Client
from .scope import Scope
from .user import User
from ..common import get_current_time


@dataclass
class AccessToken:
    """An issued access token."""

    access_token: str
    client: Client
    user: User
    access_token_expires_at: Optional[datetime] = None
    scope: Optional[Scope] = None
    # authorization code the token was issued for
    code: Optional[str] = None

    def is_access_token_expired(self, now: Optional[datetime] = None) -> bool:
        """Check if the access token is past its expiry."""
        if self.access_token_expires_at is None:
            return False
        return self.access_token_expires_at < (now or get_current_time())

    def expires_in(self, now: Optional[datetime] = None) -> Optional[int]:
        """Seconds until the access token expires."""
        if self.access_token_expires_at is None:
            return None
        delta = self.access_token_expires_at - (now or get_current_time())
        return max(0, round(delta.total_seconds()))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        result = {
            'access_token': self.access_token,
            'client_id': self.client.id,
        }

        if self.access_token_expires_at is not None:
            result['access_token_expires_at'] = self.access_token_expires_at.isoformat()
        if self.scope is not None:
            result['scope'] = self.scope.to_json()
        if self.code is not None:
            result['code'] = self.code

        return result


@dataclass
class Token(AccessToken):
    """An issued access token with an optional refresh token."""

    refresh_token: Optional[str] = None
    refresh_token_expires_at: Optional[datetime] = None

    def is_refresh_token_expired(self, now: Optional[datetime] = None) -> bool:
        """Check if the refresh token is past its expiry."""
        if self.refresh_token_expires_at is None:
            return False
        return self.refresh_token_expires_at < (now or get_current_time())

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        if self.refresh_token is not None:
            result['refresh_token'] = self.refresh_token
        if self.refresh_token_expires_at is not None:
            result['refresh_token_expires_at'] = self.refresh_token_expires_at.isoformat()
        return result


@dataclass
class RefreshToken(Token):
    """A token that is known to carry a refresh token."""

    def __post_init__(self):
        if not self.refresh_token:
            raise ValueError("refresh_token is required")
