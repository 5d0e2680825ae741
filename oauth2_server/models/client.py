"""
OAuth2 client model.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Client:
    """
    A registered OAuth2 client.

    ``extra`` holds whatever the storage layer keeps next to the fields the
    engine reads, such as a display name or a hashed secret.
    """

    id: str
    grants: List[str] = field(default_factory=list)
    redirect_uris: Optional[List[str]] = None
    access_token_lifetime: Optional[int] = None  # seconds
    refresh_token_lifetime: Optional[int] = None  # seconds
    extra: Dict[str, Any] = field(default_factory=dict)

    def allows_grant(self, grant_type: str) -> bool:
        """Check if the client may use a grant type."""
        return grant_type in (self.grants or [])

    def allows_redirect_uri(self, redirect_uri: str) -> bool:
        """Check if a redirect URI is registered for the client."""
        return redirect_uri in (self.redirect_uris or [])

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        result = {
            'id': self.id,
            'grants': list(self.grants),
        }

        if self.redirect_uris is not None:
            result['redirect_uris'] = list(self.redirect_uris)
        if self.access_token_lifetime is not None:
            result['access_token_lifetime'] = self.access_token_lifetime
        if self.refresh_token_lifetime is not None:
            result['refresh_token_lifetime'] = self.refresh_token_lifetime
        result.update(self.extra)

        return result
