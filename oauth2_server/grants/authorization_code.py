"""
The authorization code grant type.

https://datatracker.ietf.org/doc/html/rfc6749.html#section-4.1

The grant supports PKCE. Clients should use it to detect and prevent
injected (replayed) authorization codes.
https://datatracker.ietf.org/doc/html/rfc7636
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..context import OAuth2Request
from ..errors import InvalidClient, InvalidGrant, InvalidRequest, ServerError
from ..models import AuthorizationCode, Client, Scope, Token, User
from ..pkce import CHALLENGE_METHODS, ChallengeMethod, ChallengeMethods
from ..services import AuthorizationCodeService
from ..util.encoding import mask_sensitive_data, secure_compare
from .grant import ClientCredentials, Grant

logger = logging.getLogger(__name__)


@dataclass
class PKCEClientCredentials(ClientCredentials):
    code_verifier: Optional[str] = None


class AuthorizationCodeGrant(Grant):
    """Exchanges authorization codes issued by the authorize endpoint for tokens."""

    grant_type = "authorization_code"

    def __init__(
        self,
        client_service,
        token_service,
        authorization_code_service: AuthorizationCodeService,
        challenge_methods: Optional[ChallengeMethods] = None,
        **kwargs,
    ):
        super().__init__(client_service, token_service, **kwargs)
        self.authorization_code_service = authorization_code_service
        self.challenge_methods = (
            dict(CHALLENGE_METHODS) if challenge_methods is None else challenge_methods
        )

    async def get_client_credentials(self, request: OAuth2Request) -> PKCEClientCredentials:
        """A code verifier in the body replaces the client secret."""
        credentials = await super().get_client_credentials(request)
        result = PKCEClientCredentials(credentials.client_id, credentials.client_secret)
        if request.has_body:
            body = await request.body() or {}
            code_verifier = body.get("code_verifier")
            if code_verifier:
                result.code_verifier = code_verifier
                result.client_secret = None
        return result

    async def get_client(self, client_id: str) -> Client:
        client = await self.client_service.get(client_id)
        if not client:
            raise InvalidClient("client not found")
        return client

    async def get_authenticated_client(self, request: OAuth2Request) -> Client:
        credentials = await self.get_client_credentials(request)
        client_service = self.client_service
        if credentials.code_verifier:
            # the verifier is checked against the code by token()
            client = await client_service.get(credentials.client_id)
        elif credentials.client_secret:
            client = await client_service.get_authenticated(
                credentials.client_id, credentials.client_secret)
        else:
            client = await client_service.get_authenticated(credentials.client_id)
        if not client:
            logger.warning(f"Client authentication failed for client {credentials.client_id}")
            raise InvalidClient("client authentication failed")
        return client

    def get_challenge_method(self, challenge_method: Optional[str] = None) -> Optional[ChallengeMethod]:
        """Get the challenge method if it is allowed. No method means plain."""
        return self.challenge_methods.get(challenge_method or "plain")

    def validate_challenge_method(self, challenge_method: Optional[str] = None) -> bool:
        """Check that the challenge method is allowed."""
        return self.get_challenge_method(challenge_method) is not None

    def verify_code(self, code: AuthorizationCode, verifier: str) -> bool:
        """
        Check if the verifier matches the challenge of an authorization code.
        https://datatracker.ietf.org/doc/html/rfc7636#section-4.6
        """
        if not code.challenge:
            return False
        challenge_method = self.get_challenge_method(code.challenge_method)
        if challenge_method is None:
            raise ServerError("code_challenge_method not implemented")
        return secure_compare(challenge_method(verifier), code.challenge)

    async def generate_authorization_code(
        self,
        client: Client,
        user: User,
        scope: Optional[Scope] = None,
        redirect_uri: Optional[str] = None,
        challenge: Optional[str] = None,
        challenge_method: Optional[str] = None,
    ) -> AuthorizationCode:
        """Generate and save an authorization code."""
        service = self.authorization_code_service
        authorization_code = AuthorizationCode(
            code=await service.generate_code(client, user, scope),
            expires_at=await service.expires_at(client, user, scope),
            client=client,
            user=user,
            scope=scope,
            redirect_uri=redirect_uri,
            challenge=challenge,
            challenge_method=challenge_method,
        )
        return await service.save(authorization_code)

    async def token(self, request: OAuth2Request, client: Client) -> Token:
        if not request.has_body:
            raise InvalidRequest("request body required")

        body = await request.body() or {}
        code = body.get("code")
        if not code:
            raise InvalidRequest("code parameter required")

        # a code that already backs a token is being replayed
        if await self.token_service.revoke_code(code):
            logger.warning(f"Authorization code {mask_sensitive_data(code)} already used")
            raise InvalidGrant("code already used")

        authorization_code = await self.authorization_code_service.get(code)
        if not authorization_code or authorization_code.is_expired():
            raise InvalidGrant("invalid code")
        # only one exchange of a code can revoke it
        if not await self.authorization_code_service.revoke(authorization_code):
            raise InvalidGrant("invalid code")

        code_verifier = body.get("code_verifier")
        if code_verifier:
            if not self.verify_code(authorization_code, code_verifier):
                raise InvalidClient("client authentication failed")
        elif authorization_code.challenge:
            # https://datatracker.ietf.org/doc/html/draft-ietf-oauth-security-topics#section-4.8.2
            raise InvalidClient("client authentication failed")

        if client.id != authorization_code.client.id:
            raise InvalidClient("code was issued to another client")

        redirect_uri = body.get("redirect_uri")
        expected_redirect_uri = authorization_code.redirect_uri
        if expected_redirect_uri:
            if not redirect_uri:
                raise InvalidGrant("redirect_uri parameter required")
            if redirect_uri != expected_redirect_uri:
                raise InvalidGrant("incorrect redirect_uri")
        elif redirect_uri:
            raise InvalidGrant("did not expect redirect_uri parameter")

        token = await self.generate_token(client, authorization_code.user, authorization_code.scope)
        token.code = code
        return await self.token_service.save(token)
