import httpx
import pytest

from split_provider.api.client import SplitRestClient
from split_provider.api.users import UsersService
from split_provider.config import ProviderConfig
from split_provider.errors import DecodeError, NotFoundError, TransportError

BASE_URL = "https://api.split.io/internal/api/v2"


def _client(handler):
    return SplitRestClient(
        api_key="secret-key",
        base_url=BASE_URL,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_request_sends_bearer_token_and_query():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    async with _client(handler) as client:
        data = await client.get_json("/users", params={"limit": "1"})

    assert data == {"ok": True}
    request = seen[0]
    assert request.headers["Authorization"] == "Bearer secret-key"
    assert request.url.path == "/internal/api/v2/users"
    assert request.url.params["limit"] == "1"


@pytest.mark.asyncio
async def test_non_2xx_raises_transport_error_with_body():
    def handler(request):
        return httpx.Response(400, json={"message": "bad request"})

    async with _client(handler) as client:
        with pytest.raises(TransportError) as excinfo:
            await client.put_json("/users/1", {"name": "x"})

    error = excinfo.value
    assert not isinstance(error, NotFoundError)
    assert error.status_code == 400
    assert error.method == "PUT"
    assert error.path == "/users/1"
    assert "bad request" in str(error)


@pytest.mark.asyncio
async def test_404_raises_not_found_error():
    def handler(request):
        return httpx.Response(404, json={"message": "missing"})

    async with _client(handler) as client:
        with pytest.raises(NotFoundError) as excinfo:
            await client.get_json("/users/nope")

    assert isinstance(excinfo.value, TransportError)
    assert excinfo.value.status_code == 404


@pytest.mark.asyncio
async def test_network_failure_raises_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(TransportError) as excinfo:
            await client.get_json("/users")

    assert excinfo.value.status_code is None
    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
async def test_malformed_json_raises_decode_error():
    def handler(request):
        return httpx.Response(200, content=b"{not json")

    async with _client(handler) as client:
        with pytest.raises(DecodeError):
            await client.get_json("/users")


@pytest.mark.asyncio
async def test_empty_body_decodes_to_none():
    def handler(request):
        return httpx.Response(200)

    async with _client(handler) as client:
        response = await client.request("DELETE", "/users/1")

    assert response.data is None
    assert response.status_code == 200


def test_from_config_uses_config_values():
    config = ProviderConfig(api_key="k", base_url="https://example.test/api/")
    client = SplitRestClient.from_config(config)
    assert client.base_url == "https://example.test/api"


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [302, 304])
async def test_non_success_status_is_not_an_empty_result(status_code):
    def handler(request):
        return httpx.Response(
            status_code, headers={"Location": "https://elsewhere.test/users"}
        )

    async with _client(handler) as client:
        service = UsersService(client)
        with pytest.raises(TransportError) as excinfo:
            await service.get("u1")
        assert excinfo.value.status_code == status_code

        with pytest.raises(TransportError):
            await service.find_by_email("a@example.com")


@pytest.mark.asyncio
async def test_empty_body_for_record_raises_decode_error():
    def handler(request):
        return httpx.Response(204)

    async with _client(handler) as client:
        with pytest.raises(DecodeError):
            await UsersService(client).get("u1")
