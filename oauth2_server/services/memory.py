"""
In-memory implementations of the storage ports.

Suitable for tests, development and single-process deployments. Every
service guards its state with an ``asyncio.Lock``.
"""

import asyncio
import logging
from typing import Dict, Optional, Set, Union

from ..config import ServerConfig
from ..models import AuthorizationCode, Client, RefreshToken, Token, User
from ..util.encoding import mask_sensitive_data
from .authorization_code import AuthorizationCodeService
from .client import ClientService
from .token import RefreshTokenService
from .user import UserService, generate_salt, hash_password, verify_password

logger = logging.getLogger(__name__)


class MemoryClientService(ClientService):
    """
    In-memory client registry.

    Client secrets are kept as salted PBKDF2 hashes. A client registered
    without a secret is a public client and authenticates by id alone.
    """

    def __init__(self):
        self._clients: Dict[str, Client] = {}
        self._secrets: Dict[str, Dict[str, str]] = {}
        self._users: Dict[str, User] = {}
        self._lock = asyncio.Lock()

    async def add(self, client: Client, secret: Optional[str] = None,
                  user: Optional[User] = None) -> Client:
        """Register a client, optionally with a secret and the user it acts as."""
        async with self._lock:
            self._clients[client.id] = client
            self._secrets.pop(client.id, None)
            self._users.pop(client.id, None)
            if secret is not None:
                salt = generate_salt()
                self._secrets[client.id] = {'salt': salt, 'hash': hash_password(secret, salt)}
            if user is not None:
                self._users[client.id] = user
            logger.debug(f"Registered client {client.id}")
            return client

    async def delete(self, client_id: str) -> bool:
        """Remove a client."""
        async with self._lock:
            self._secrets.pop(client_id, None)
            self._users.pop(client_id, None)
            if self._clients.pop(client_id, None) is None:
                return False
            logger.debug(f"Deleted client {client_id}")
            return True

    async def get(self, client_id: str) -> Optional[Client]:
        async with self._lock:
            return self._clients.get(client_id)

    async def get_authenticated(
        self,
        client_id: str,
        client_secret: Optional[str] = None,
    ) -> Optional[Client]:
        async with self._lock:
            client = self._clients.get(client_id)
            if client is None:
                return None

            stored = self._secrets.get(client_id)
            if stored is None:
                # public clients have no secret to present
                return client if client_secret is None else None
            if client_secret is None:
                return None
            if not verify_password(client_secret, stored['salt'], stored['hash']):
                logger.debug(f"Client secret mismatch for client {client_id}")
                return None
            return client

    async def get_user(self, client: Union[Client, str]) -> Optional[User]:
        client_id = client if isinstance(client, str) else client.id
        async with self._lock:
            return self._users.get(client_id)


class MemoryUserService(UserService):
    """In-memory resource owners with salted PBKDF2 password hashes."""

    def __init__(self):
        self._users: Dict[str, Dict] = {}
        self._lock = asyncio.Lock()

    async def add(self, username: str, password: str,
                  user: Optional[User] = None) -> User:
        """Register a user. The user defaults to ``{"username": username}``."""
        if user is None:
            user = {'username': username}
        salt = generate_salt()
        async with self._lock:
            self._users[username] = {
                'user': user,
                'salt': salt,
                'hash': hash_password(password, salt),
            }
            logger.debug(f"Registered user {username}")
        return user

    async def get_authenticated(self, username: str, password: str) -> Optional[User]:
        async with self._lock:
            entry = self._users.get(username)
        if entry is None:
            return None
        if not verify_password(password, entry['salt'], entry['hash']):
            logger.debug(f"Password mismatch for user {username}")
            return None
        return entry['user']


class MemoryAuthorizationCodeService(AuthorizationCodeService):
    """In-memory authorization code store."""

    def __init__(self, config: Optional[ServerConfig] = None):
        if config is not None:
            self.lifetime = config.authorization_code_lifetime
        self._codes: Dict[str, AuthorizationCode] = {}
        self._lock = asyncio.Lock()

    async def get(self, code: str) -> Optional[AuthorizationCode]:
        async with self._lock:
            return self._codes.get(code)

    async def save(self, authorization_code: AuthorizationCode) -> AuthorizationCode:
        async with self._lock:
            self._codes[authorization_code.code] = authorization_code
            logger.debug(
                f"Stored authorization code {mask_sensitive_data(authorization_code.code)} "
                f"for client {authorization_code.client.id}"
            )
            return authorization_code

    async def revoke(self, authorization_code: Union[AuthorizationCode, str]) -> bool:
        code = (authorization_code if isinstance(authorization_code, str)
                else authorization_code.code)
        async with self._lock:
            if self._codes.pop(code, None) is None:
                return False
            logger.debug(f"Revoked authorization code {mask_sensitive_data(code)}")
            return True


class MemoryTokenService(RefreshTokenService):
    """
    In-memory token store that issues refresh tokens.

    Tokens are indexed by access token, by refresh token and by the
    authorization code they were issued for, so that replaying a code can
    revoke every token it produced.
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        if config is not None:
            self.access_token_lifetime = config.access_token_lifetime
            self.refresh_token_lifetime = config.refresh_token_lifetime
        self._tokens: Dict[str, Token] = {}
        self._refresh_tokens: Dict[str, str] = {}
        self._codes: Dict[str, Set[str]] = {}
        self._lock = asyncio.Lock()

    async def get_token(self, access_token: str) -> Optional[Token]:
        async with self._lock:
            return self._tokens.get(access_token)

    async def get_refresh_token(self, refresh_token: str) -> Optional[RefreshToken]:
        async with self._lock:
            access_token = self._refresh_tokens.get(refresh_token)
            if access_token is None:
                return None
            return self._tokens.get(access_token)

    async def save(self, token: Token) -> Token:
        async with self._lock:
            self._tokens[token.access_token] = token
            if token.refresh_token:
                self._refresh_tokens[token.refresh_token] = token.access_token
            if token.code:
                self._codes.setdefault(token.code, set()).add(token.access_token)
            logger.debug(
                f"Stored token {mask_sensitive_data(token.access_token)} "
                f"for client {token.client.id}"
            )
            return token

    def _remove(self, access_token: str) -> bool:
        token = self._tokens.pop(access_token, None)
        if token is None:
            return False
        if token.refresh_token and self._refresh_tokens.get(token.refresh_token) == access_token:
            del self._refresh_tokens[token.refresh_token]
        if token.code:
            issued = self._codes.get(token.code)
            if issued is not None:
                issued.discard(access_token)
                if not issued:
                    del self._codes[token.code]
        logger.debug(f"Revoked token {mask_sensitive_data(access_token)}")
        return True

    async def revoke(self, token: Union[Token, str]) -> bool:
        access_token = token if isinstance(token, str) else token.access_token
        async with self._lock:
            return self._remove(access_token)

    async def revoke_code(self, code: str) -> bool:
        async with self._lock:
            issued = list(self._codes.get(code, ()))
            revoked = [access_token for access_token in issued if self._remove(access_token)]
            return bool(revoked)

    async def cleanup(self) -> int:
        """Remove tokens whose access and refresh tokens have both expired."""
        async with self._lock:
            expired = [
                access_token for access_token, token in self._tokens.items()
                if token.is_access_token_expired()
                and (not token.refresh_token or token.is_refresh_token_expired())
            ]
            for access_token in expired:
                self._remove(access_token)
            if expired:
                logger.info(f"Cleaned up {len(expired)} expired tokens")
            return len(expired)
