"""
OAuth 2.0 error taxonomy.

Every failure the engine reports is an ``OAuth2Error`` subclass carrying the
HTTP status, the RFC 6749 error code and an optional reference URI. Errors are
terminal: they are raised at the point of failure and written to the response
by the endpoint that received the request.

https://datatracker.ietf.org/doc/html/rfc6749#section-5.2
"""

import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class OAuth2Error(Exception):
    """
    Base exception class for all OAuth2 errors.

    Subclasses fix ``status`` and ``code``; both may still be overridden per
    instance, which is how adapters report a custom status for a known code.
    """

    status: int = 500
    code: Optional[str] = None

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status: Optional[int] = None,
        code: Optional[str] = None,
        uri: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message or "")
        self.message = message or ""
        if status is not None:
            self.status = status
        if code is not None:
            self.code = code
        self.uri = uri
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to the RFC 6749 error response body."""
        result = {"error": self.code or "server_error"}
        if self.message:
            result["error_description"] = self.message
        if self.uri:
            result["error_uri"] = self.uri
        return result

    def is_client_error(self) -> bool:
        """Check if this error was caused by the client."""
        return 400 <= self.status < 500

    def is_server_error(self) -> bool:
        """Check if this error was caused by the server."""
        return self.status >= 500

    def __repr__(self) -> str:
        return f"{self.name}(status={self.status}, code={self.code!r}, message={self.message!r})"


class InvalidRequest(OAuth2Error):
    """
    The request is missing a required parameter, includes an unsupported
    parameter value, repeats a parameter, includes multiple credentials,
    utilizes more than one mechanism for authenticating the client, or is
    otherwise malformed.
    """

    status = 400
    code = "invalid_request"


class InvalidClient(OAuth2Error):
    """Client authentication failed."""

    status = 401
    code = "invalid_client"


class InvalidGrant(OAuth2Error):
    """
    The provided authorization grant or refresh token is invalid, expired,
    revoked, does not match the redirection URI used in the authorization
    request, or was issued to another client.
    """

    status = 400
    code = "invalid_grant"


class UnauthorizedClient(OAuth2Error):
    """The authenticated client is not authorized to use this grant type."""

    status = 401
    code = "unauthorized_client"


class UnsupportedGrantType(OAuth2Error):
    """The grant type is not supported by the authorization server."""

    status = 400
    code = "unsupported_grant_type"


class UnsupportedResponseType(OAuth2Error):
    """The authorization server does not support this response type."""

    status = 400
    code = "unsupported_response_type"


class InvalidScope(OAuth2Error):
    """The requested scope is invalid, unknown, or malformed."""

    status = 400
    code = "invalid_scope"


class AccessDenied(OAuth2Error):
    """The resource owner or authorization server denied the request."""

    status = 401
    code = "access_denied"


class ServerError(OAuth2Error):
    """
    The authorization server encountered an unexpected condition that
    prevented it from fulfilling the request.
    """

    status = 500
    code = "server_error"


class TemporarilyUnavailable(OAuth2Error):
    """
    The authorization server is currently unable to handle the request due to
    a temporary overloading or maintenance of the server.
    """

    status = 503
    code = "temporarily_unavailable"


def is_oauth2_error(error: BaseException) -> bool:
    """Check if an exception is part of the OAuth2 error taxonomy."""
    return isinstance(error, OAuth2Error)


def wrap_exception(exc: BaseException, message: str = "unexpected error") -> OAuth2Error:
    """Wrap a generic exception as a server error, keeping it as the cause."""
    if isinstance(exc, OAuth2Error):
        return exc
    logger.error(f"Wrapping unexpected {type(exc).__name__}: {exc}")
    return ServerError(message, cause=exc)


__all__ = [
    "OAuth2Error",
    "InvalidRequest",
    "InvalidClient",
    "InvalidGrant",
    "UnauthorizedClient",
    "UnsupportedGrantType",
    "UnsupportedResponseType",
    "InvalidScope",
    "AccessDenied",
    "ServerError",
    "TemporarilyUnavailable",
    "is_oauth2_error",
    "wrap_exception",
]
