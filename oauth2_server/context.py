"""
Request and response ports.

The engine never touches a framework's request or response objects directly.
Adapters wrap them in ``OAuth2Request`` / ``OAuth2Response`` implementations;
``FormRequest`` and ``SimpleResponse`` are plain in-memory implementations for
adapters that already hold a parsed request, and for tests.
"""

import inspect
import logging
from abc import ABC, abstractmethod
from collections.abc import MutableMapping
from dataclasses import dataclass, fields
from typing import (
    Any, Awaitable, Callable, Dict, Iterable, Iterator, Mapping, Optional,
    Tuple, Union,
)
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from .models import AuthorizationCode, Scope, Token, User

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

HeadersInit = Union[Mapping[str, str], Iterable[Tuple[str, str]], None]


class Headers(MutableMapping):
    """Case-insensitive HTTP header mapping that keeps the first-seen key casing."""

    def __init__(self, headers: HeadersInit = None):
        self._items: Dict[str, Tuple[str, str]] = {}
        if headers:
            items = headers.items() if isinstance(headers, Mapping) else headers
            for key, value in items:
                self[key] = value

    def __getitem__(self, key: str) -> str:
        return self._items[key.lower()][1]

    def __setitem__(self, key: str, value: str) -> None:
        current = self._items.get(key.lower())
        self._items[key.lower()] = (current[0] if current else key, str(value))

    def __delitem__(self, key: str) -> None:
        del self._items[key.lower()]

    def __iter__(self) -> Iterator[str]:
        return (name for name, _ in self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._items

    def __repr__(self) -> str:
        return f"Headers({dict(self.items())!r})"


def media_type(content_type: Optional[str]) -> Optional[str]:
    """Strip parameters such as charset from a content-type header value."""
    if not content_type:
        return None
    return content_type.split(";", 1)[0].strip().lower()


def parse_form(body: Union[str, bytes, None]) -> Dict[str, str]:
    """
    Parse an application/x-www-form-urlencoded body.

    The first value wins for repeated keys. Malformed bodies parse to an
    empty form instead of raising.
    """
    if not body:
        return {}
    try:
        if isinstance(body, bytes):
            body = body.decode("utf-8")
        form: Dict[str, str] = {}
        for key, value in parse_qsl(body, keep_blank_values=True, strict_parsing=True):
            form.setdefault(key, value)
        return form
    except (UnicodeDecodeError, ValueError) as e:
        logger.debug(f"Ignoring malformed form body: {e}")
        return {}


def query_params(url: str) -> Dict[str, str]:
    """Get the query parameters of a URL, first value winning."""
    params: Dict[str, str] = {}
    for key, value in parse_qsl(urlsplit(url).query, keep_blank_values=True):
        params.setdefault(key, value)
    return params


def set_query_params(url: str, params: Mapping[str, Optional[str]]) -> str:
    """
    Set query parameters on a URL.

    An existing key keeps its position and loses any repeated values, new keys
    are appended and keys mapped to ``None`` are left untouched.
    """
    parts = urlsplit(url)
    pending = {key: value for key, value in params.items() if value is not None}
    result = []
    for key, value in parse_qsl(parts.query, keep_blank_values=True):
        if key not in pending:
            result.append((key, value))
        elif pending[key] is not None:
            result.append((key, pending[key]))
            pending[key] = None
    result.extend((key, value) for key, value in pending.items() if value is not None)
    return urlunsplit(parts._replace(query=urlencode(result)))


@dataclass
class AuthorizeParameters:
    """Parameters of an authorization request."""
    response_type: Optional[str] = None
    client_id: Optional[str] = None
    redirect_uri: Optional[str] = None
    state: Optional[str] = None
    scope: Optional[str] = None
    challenge: Optional[str] = None
    challenge_method: Optional[str] = None

    # query/body parameter name for each field
    PARAMETER_NAMES = {
        "response_type": "response_type",
        "client_id": "client_id",
        "redirect_uri": "redirect_uri",
        "state": "state",
        "scope": "scope",
        "challenge": "code_challenge",
        "challenge_method": "code_challenge_method",
    }

    def to_query(self) -> Dict[str, str]:
        """Convert to query parameters, omitting unset values."""
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                result[self.PARAMETER_NAMES[f.name]] = value
        return result


class OAuth2Request(ABC):
    """
    Request port.

    Besides the transport accessors, a request carries the state the engine
    builds while handling it. That state belongs to a single request and must
    not be shared between requests.
    """

    def __init__(self):
        # resource server
        self.token: Optional[Token] = None
        self.token_resolved: bool = False
        self.access_token: Optional[str] = None
        self.accepted_scope: Optional[Scope] = None
        # authorize endpoint
        self.authorize_parameters: Optional[AuthorizeParameters] = None
        self.redirect_url: Optional[str] = None
        self.requested_scope: Optional[Scope] = None
        self.user: Optional[User] = None
        self.authorized_scope: Optional[Scope] = None
        self.authorization_code: Optional[AuthorizationCode] = None

    @property
    @abstractmethod
    def url(self) -> str:
        """The full request URL."""

    @property
    @abstractmethod
    def headers(self) -> Headers:
        """Case-insensitive request headers."""

    @property
    @abstractmethod
    def method(self) -> str:
        """The upper-case request method."""

    @property
    @abstractmethod
    def has_body(self) -> bool:
        """Whether the request has a body."""

    @abstractmethod
    async def body(self) -> Optional[Dict[str, str]]:
        """
        The parsed form body.

        ``None`` when the body is not form encoded; an empty dict when it
        could not be parsed.
        """


class OAuth2Response(ABC):
    """Response port."""

    status: Optional[int]
    headers: Headers
    # a value, an awaitable, or a callable producing either
    body: Any

    @abstractmethod
    async def redirect(self, url: str) -> None:
        """Redirect the user-agent to ``url``."""


class FormRequest(OAuth2Request):
    """An in-memory request whose body is raw form data."""

    def __init__(
        self,
        url: str,
        method: str = "GET",
        headers: HeadersInit = None,
        body: Union[str, bytes, Mapping[str, str], None] = None,
    ):
        super().__init__()
        self._url = url
        self._method = method.upper()
        self._headers = Headers(headers)
        if isinstance(body, Mapping):
            body = urlencode(body)
            self._headers.setdefault("content-type", FORM_CONTENT_TYPE)
        self._raw_body = body
        self._form: Optional[Dict[str, str]] = None
        self._parsed = False

    @property
    def url(self) -> str:
        return self._url

    @property
    def headers(self) -> Headers:
        return self._headers

    @property
    def method(self) -> str:
        return self._method

    @property
    def has_body(self) -> bool:
        return self._raw_body is not None

    async def body(self) -> Optional[Dict[str, str]]:
        if not self._parsed:
            self._parsed = True
            if self.has_body and media_type(self.headers.get("content-type")) == FORM_CONTENT_TYPE:
                self._form = parse_form(self._raw_body)
        return self._form


class SimpleResponse(OAuth2Response):
    """An in-memory response."""

    def __init__(self):
        self.status: Optional[int] = None
        self.headers = Headers()
        self.body: Any = None
        self.redirected_to: Optional[str] = None

    async def redirect(self, url: str) -> None:
        self.status = 302
        self.headers["Location"] = url
        self.redirected_to = url

    async def resolve_body(self) -> Any:
        """Resolve a deferred body to its value."""
        body = self.body
        if callable(body):
            body = body()
        if inspect.isawaitable(body):
            body = await body
        return body


async def authorize_parameters(request: OAuth2Request) -> AuthorizeParameters:
    """
    Gets the authorization parameters of a request.

    Body parameters take precedence over query parameters.
    """
    params = query_params(request.url)
    if request.method == "POST" and request.has_body:
        body = await request.body()
        if body:
            params.update(body)

    values = {
        name: params.get(parameter) or None
        for name, parameter in AuthorizeParameters.PARAMETER_NAMES.items()
    }
    return AuthorizeParameters(**values)


def authorize_url(request: OAuth2Request) -> str:
    """Rebuilds the authorize URL for a request's authorization parameters."""
    parts = urlsplit(request.url)
    base = urlunsplit(parts._replace(query="", fragment=""))
    parameters = request.authorize_parameters or AuthorizeParameters()
    return set_query_params(base, parameters.to_query())


LoginCallback = Callable[[OAuth2Request, OAuth2Response], Awaitable[None]]


def login_redirect_factory(
    login_url: str,
    redirect_parameter: str = "redirect_uri",
) -> LoginCallback:
    """
    Creates a login callback for the authorize endpoint.

    The callback redirects to ``login_url`` with the authorize URL attached so
    the login page can send the user back once a session exists.
    """
    async def login(request: OAuth2Request, response: OAuth2Response) -> None:
        url = set_query_params(login_url, {redirect_parameter: authorize_url(request)})
        logger.debug(f"Redirecting to login page {login_url}")
        await response.redirect(url)

    return login
