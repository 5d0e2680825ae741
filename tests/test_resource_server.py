"""
Tests for the resource server.
"""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from oauth2_server import (
    AccessDenied,
    FormRequest,
    ResourceServer,
    Scope,
    ServerConfig,
    ServerError,
    SimpleResponse,
    Token,
)
from oauth2_server.common import get_current_time

RESOURCE_URL = "https://api.example.com/resource"


@pytest.fixture
def resource_server(token_service):
    return ResourceServer(token_service)


@pytest.fixture
def save_token(token_service, client, user):
    async def save(access_token="valid", scope="read write", expired=False):
        offset = timedelta(seconds=-1 if expired else 3600)
        token = Token(
            access_token=access_token,
            client=client,
            user=user,
            access_token_expires_at=get_current_time() + offset,
            scope=Scope(scope) if scope is not None else None,
        )
        return await token_service.save(token)
    return save


def bearer_request(access_token=None, method="GET", body=None):
    headers = {}
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    return FormRequest(RESOURCE_URL, method, headers, body)


class TestGetAccessToken:
    """Test reading access tokens from requests"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("authorization", [
        "Bearer abc.DEF-123~_+/==",
        "bearer abc.DEF-123~_+/==",
        "  BEARER   abc.DEF-123~_+/==  ",
    ])
    async def test_authorization_header(self, resource_server, authorization):
        request = FormRequest(RESOURCE_URL, headers={"Authorization": authorization})
        assert await resource_server.get_access_token(request) == "abc.DEF-123~_+/=="

    @pytest.mark.asyncio
    @pytest.mark.parametrize("authorization", ["Basic abc", "Bearer", "Bearer a b", "Bearer a=b"])
    async def test_invalid_authorization_header(self, resource_server, authorization):
        request = FormRequest(RESOURCE_URL, headers={"Authorization": authorization})
        assert await resource_server.get_access_token(request) is None

    @pytest.mark.asyncio
    async def test_form_body(self, resource_server):
        request = bearer_request(method="POST", body={"access_token": "abc"})
        assert await resource_server.get_access_token(request) == "abc"

    @pytest.mark.asyncio
    async def test_form_body_only_for_post(self, resource_server):
        request = FormRequest(
            RESOURCE_URL, "PUT", {"content-type": "application/x-www-form-urlencoded"}, "access_token=abc",
        )
        assert await resource_server.get_access_token(request) is None

    @pytest.mark.asyncio
    async def test_header_takes_precedence(self, resource_server):
        request = bearer_request("header", method="POST", body={"access_token": "body"})
        assert await resource_server.get_access_token(request) == "header"


class TestGetToken:
    """Test resolving access tokens"""

    @pytest.mark.asyncio
    async def test_valid(self, resource_server, save_token):
        token = await save_token()
        assert await resource_server.get_token("valid") is token

    @pytest.mark.asyncio
    async def test_unknown(self, resource_server):
        with pytest.raises(AccessDenied) as exc_info:
            await resource_server.get_token("unknown")
        assert exc_info.value.message == "invalid access_token"

    @pytest.mark.asyncio
    async def test_expired(self, resource_server, save_token):
        await save_token(expired=True)
        with pytest.raises(AccessDenied) as exc_info:
            await resource_server.get_token("valid")
        assert exc_info.value.message == "invalid access_token"

    @pytest.mark.asyncio
    async def test_token_service_required(self):
        with pytest.raises(ServerError) as exc_info:
            await ResourceServer().get_token("valid")
        assert exc_info.value.message == "token service required"


class TestGetTokenForRequest:
    """Test resolving the token of a request"""

    @pytest.mark.asyncio
    async def test_from_header(self, resource_server, save_token):
        token = await save_token()
        request = bearer_request("valid")
        assert await resource_server.get_token_for_request(request) is token
        assert request.token is token
        assert request.access_token == "valid"
        assert request.token_resolved

    @pytest.mark.asyncio
    async def test_resolved_once(self, resource_server, save_token, token_service):
        token = await save_token()
        request = bearer_request("valid")
        await resource_server.get_token_for_request(request)
        await token_service.revoke(token)
        assert await resource_server.get_token_for_request(request) is token

    @pytest.mark.asyncio
    async def test_authentication_required(self, resource_server):
        request = bearer_request()
        with pytest.raises(AccessDenied) as exc_info:
            await resource_server.get_token_for_request(request)
        assert exc_info.value.message == "authentication required"

        with pytest.raises(AccessDenied) as exc_info:
            await resource_server.get_token_for_request(request)
        assert exc_info.value.message == "authentication required"

    @pytest.mark.asyncio
    async def test_invalid_access_token_is_remembered(self, resource_server):
        request = bearer_request("unknown")
        with pytest.raises(AccessDenied):
            await resource_server.get_token_for_request(request)
        with pytest.raises(AccessDenied) as exc_info:
            await resource_server.get_token_for_request(request)
        assert exc_info.value.message == "invalid access_token"

    @pytest.mark.asyncio
    async def test_access_token_getter(self, resource_server, save_token):
        token = await save_token("from-getter")
        get_access_token = AsyncMock(return_value="from-getter")
        request = bearer_request("ignored")

        assert await resource_server.get_token_for_request(request, get_access_token) is token
        get_access_token.assert_awaited_once_with(request, False)

    @pytest.mark.asyncio
    async def test_access_token_getter_retried_once(self, resource_server, save_token):
        token = await save_token("fresh")
        get_access_token = AsyncMock(side_effect=["stale", "fresh"])
        request = bearer_request()

        assert await resource_server.get_token_for_request(request, get_access_token) is token
        assert [call.args for call in get_access_token.await_args_list] == [(request, False), (request, True)]
        assert request.access_token == "fresh"

    @pytest.mark.asyncio
    async def test_refreshed_token_rejected(self, resource_server):
        get_access_token = AsyncMock(side_effect=["stale", "still-stale"])
        with pytest.raises(AccessDenied) as exc_info:
            await resource_server.get_token_for_request(bearer_request(), get_access_token)
        assert exc_info.value.message == "invalid access_token"
        assert get_access_token.await_count == 2

    @pytest.mark.asyncio
    async def test_server_error_not_retried(self, resource_server, token_service):
        get_access_token = AsyncMock(return_value="abc")
        token_service.get_token = AsyncMock(side_effect=ServerError("storage unavailable"))
        with pytest.raises(ServerError):
            await resource_server.get_token_for_request(bearer_request(), get_access_token)
        get_access_token.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_getter_falls_back_to_request(self, resource_server, save_token):
        token = await save_token()
        get_access_token = AsyncMock(return_value=None)
        assert await resource_server.get_token_for_request(bearer_request("valid"), get_access_token) is token


class TestAuthenticate:
    """Test authenticating requests"""

    @pytest.mark.asyncio
    async def test_success(self, resource_server, save_token):
        token = await save_token()
        request = bearer_request("valid")
        response = SimpleResponse()
        next = AsyncMock()

        await resource_server.authenticate(request, response, next, accepted_scope="read")

        next.assert_awaited_once_with()
        assert request.token is token
        assert request.accepted_scope == Scope("read")
        assert response.headers["X-OAuth-Scopes"] == "read write"
        assert response.headers["X-Accepted-OAuth-Scopes"] == "read"

    @pytest.mark.asyncio
    async def test_success_without_accepted_scope(self, resource_server, save_token):
        await save_token(scope=None)
        response = SimpleResponse()
        next = AsyncMock()

        await resource_server.authenticate(bearer_request("valid"), response, next)

        next.assert_awaited_once()
        assert response.headers["X-OAuth-Scopes"] == ""
        assert response.headers["X-Accepted-OAuth-Scopes"] == ""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("scope", ["write", None])
    async def test_insufficient_scope(self, resource_server, save_token, scope):
        await save_token(scope=scope)
        response = SimpleResponse()
        next = AsyncMock()

        await resource_server.authenticate(bearer_request("valid"), response, next, accepted_scope="read")

        next.assert_not_awaited()
        assert response.status == 401
        assert response.body == {"error": "access_denied", "error_description": "insufficient scope"}
        assert response.headers["X-Accepted-OAuth-Scopes"] == "read"

    @pytest.mark.asyncio
    async def test_expired_token(self, resource_server, save_token):
        await save_token(expired=True)
        response = SimpleResponse()
        next = AsyncMock()

        await resource_server.authenticate(bearer_request("valid"), response, next)

        next.assert_not_awaited()
        assert response.status == 401
        assert response.body == {"error": "access_denied", "error_description": "invalid access_token"}
        assert response.headers["WWW-Authenticate"] == 'Basic realm="Service"'

    @pytest.mark.asyncio
    async def test_no_token(self, token_service):
        resource_server = ResourceServer(token_service, config=ServerConfig(realm="Example"))
        response = SimpleResponse()

        await resource_server.authenticate(bearer_request(), response, AsyncMock())

        assert response.status == 401
        assert response.body == {"error": "access_denied", "error_description": "authentication required"}
        assert "WWW-Authenticate" not in response.headers

    @pytest.mark.asyncio
    async def test_realm(self, token_service):
        resource_server = ResourceServer(token_service, realm="Api", config=ServerConfig(realm="Example"))
        response = SimpleResponse()

        await resource_server.authenticate(bearer_request("unknown"), response, AsyncMock())

        assert response.headers["WWW-Authenticate"] == 'Basic realm="Api"'

    @pytest.mark.asyncio
    async def test_unexpected_error(self, resource_server, save_token):
        await save_token()
        response = SimpleResponse()
        next = AsyncMock(side_effect=RuntimeError("boom"))

        await resource_server.authenticate(bearer_request("valid"), response, next)

        assert response.status == 500
        assert response.body == {"error": "server_error", "error_description": "unexpected error"}
