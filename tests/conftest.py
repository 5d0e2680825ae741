"""
Shared fixtures for the OAuth2 server tests.
"""

import base64

import pytest
import pytest_asyncio

from oauth2_server import (
    Client,
    FormRequest,
    MemoryAuthorizationCodeService,
    MemoryClientService,
    MemoryTokenService,
    MemoryUserService,
)

FORM = "application/x-www-form-urlencoded"
TOKEN_URL = "https://auth.example.com/token"


def encode_basic_auth(client_id, secret=""):
    credentials = base64.b64encode(f"{client_id}:{secret}".encode("utf-8")).decode("ascii")
    return f"basic {credentials}"


@pytest.fixture
def basic_auth():
    """Build a basic authorization header value."""
    return encode_basic_auth


@pytest.fixture
def token_request():
    """Build a token endpoint request."""
    def build(body=None, authorization=None, method="POST", content_type=FORM):
        headers = {}
        if content_type:
            headers["content-type"] = content_type
        if authorization:
            headers["authorization"] = authorization
        return FormRequest(TOKEN_URL, method, headers, body)
    return build


@pytest.fixture
def client():
    return Client(
        id="1",
        grants=["authorization_code", "refresh_token", "client_credentials", "password"],
        redirect_uris=["https://client.example.com/cb", "https://client2.example.com/cb"],
    )


@pytest.fixture
def other_client():
    return Client(
        id="2",
        grants=["authorization_code", "refresh_token"],
        redirect_uris=["https://other.example.com/cb"],
    )


@pytest.fixture
def user():
    return {"username": "kyle"}


@pytest_asyncio.fixture
async def client_service(client, other_client, user):
    service = MemoryClientService()
    await service.add(client, secret="secret", user=user)
    await service.add(other_client, secret="other")
    return service


@pytest_asyncio.fixture
async def user_service(user):
    service = MemoryUserService()
    await service.add("kyle", "hunter2", user)
    return service


@pytest.fixture
def token_service():
    return MemoryTokenService()


@pytest.fixture
def code_service():
    return MemoryAuthorizationCodeService()
