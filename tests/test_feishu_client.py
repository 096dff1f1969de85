import json

import httpx
import pytest
import respx

from gyeongbo.clients.feishu import FeishuClient
from gyeongbo.clients.token_cache import TokenCache
from gyeongbo.config.settings import AppSettings
from gyeongbo.errors import FeishuAPIError, UploadFailed

API = "https://open.feishu.cn/open-apis"
TOKEN_URL = f"{API}/auth/v3/tenant_access_token/internal/"
IMAGE_URL = f"{API}/image/v4/put/"
USER_URL = f"{API}/contact/v3/users/batch_get_id"


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def token_response(token: str = "t-1", expire: int = 7200) -> httpx.Response:
    return httpx.Response(200, json={"code": 0, "msg": "ok", "tenant_access_token": token, "expire": expire})


def make_client(cache: TokenCache | None = None) -> FeishuClient:
    return FeishuClient("cli_a", "s3cret", settings=AppSettings(), token_cache=cache)


@pytest.mark.asyncio
async def test_token_is_cached_within_expiry(respx_mock: respx.MockRouter) -> None:
    route = respx_mock.post(TOKEN_URL).mock(return_value=token_response())

    async with make_client() as client:
        first = await client.get_tenant_access_token()
        second = await client.get_tenant_access_token()

    assert first == second == "t-1"
    assert route.call_count == 1
    assert json.loads(route.calls.last.request.content) == {"app_id": "cli_a", "app_secret": "s3cret"}


@pytest.mark.asyncio
async def test_token_is_refreshed_once_after_expiry(respx_mock: respx.MockRouter) -> None:
    route = respx_mock.post(TOKEN_URL).mock(
        side_effect=[token_response("t-1", expire=60), token_response("t-2", expire=60)]
    )
    clock = FakeClock()

    async with make_client(TokenCache(clock=clock)) as client:
        assert await client.get_tenant_access_token() == "t-1"
        clock.now = 61
        assert await client.get_tenant_access_token() == "t-2"
        assert await client.get_tenant_access_token() == "t-2"

    assert route.call_count == 2


@pytest.mark.asyncio
async def test_token_error_code_propagates(respx_mock: respx.MockRouter) -> None:
    respx_mock.post(TOKEN_URL).mock(
        return_value=httpx.Response(200, json={"code": 10003, "msg": "invalid param"})
    )

    async with make_client() as client:
        with pytest.raises(FeishuAPIError) as excinfo:
            await client.get_tenant_access_token()

    assert excinfo.value.api_code == 10003


@pytest.mark.asyncio
async def test_upload_image_sends_multipart_with_bearer_token(respx_mock: respx.MockRouter, tmp_path) -> None:
    image_path = tmp_path / "panel.png"
    image_path.write_bytes(b"\x89PNG-bytes")
    respx_mock.post(TOKEN_URL).mock(return_value=token_response())
    route = respx_mock.post(IMAGE_URL).mock(
        return_value=httpx.Response(200, json={"code": 0, "msg": "ok", "data": {"image_key": "img_v2_1"}})
    )

    async with make_client() as client:
        image_key = await client.upload_image(str(image_path))

    assert image_key == "img_v2_1"
    request = route.calls.last.request
    assert request.headers["Authorization"] == "Bearer t-1"
    assert request.headers["Content-Type"].startswith("multipart/form-data")
    body = request.content
    assert b'name="image_type"' in body
    assert b'name="image"; filename="panel.png"' in body
    assert b"\x89PNG-bytes" in body


@pytest.mark.asyncio
async def test_upload_image_raises_upload_failed_on_http_error(respx_mock: respx.MockRouter, tmp_path) -> None:
    image_path = tmp_path / "panel.png"
    image_path.write_bytes(b"png")
    respx_mock.post(TOKEN_URL).mock(return_value=token_response())
    respx_mock.post(IMAGE_URL).mock(return_value=httpx.Response(500, text="boom"))

    async with make_client() as client:
        with pytest.raises(UploadFailed):
            await client.upload_image(str(image_path))


@pytest.mark.asyncio
async def test_upload_image_raises_upload_failed_without_image_key(respx_mock: respx.MockRouter, tmp_path) -> None:
    image_path = tmp_path / "panel.png"
    image_path.write_bytes(b"png")
    respx_mock.post(TOKEN_URL).mock(return_value=token_response())
    respx_mock.post(IMAGE_URL).mock(return_value=httpx.Response(200, json={"code": 0, "data": {}}))

    async with make_client() as client:
        with pytest.raises(UploadFailed):
            await client.upload_image(str(image_path))


@pytest.mark.asyncio
async def test_upload_image_raises_upload_failed_for_missing_file(respx_mock: respx.MockRouter, tmp_path) -> None:
    respx_mock.post(TOKEN_URL).mock(return_value=token_response())

    async with make_client() as client:
        with pytest.raises(UploadFailed):
            await client.upload_image(str(tmp_path / "missing.png"))


@pytest.mark.asyncio
async def test_batch_get_user_ids_maps_by_email(respx_mock: respx.MockRouter) -> None:
    respx_mock.post(TOKEN_URL).mock(return_value=token_response())
    route = respx_mock.post(USER_URL).mock(
        return_value=httpx.Response(
            200,
            json={
                "code": 0,
                "data": {
                    "user_list": [
                        {"email": "b@x.com", "user_id": "ou_b"},
                        {"email": "a@x.com", "user_id": "ou_a"},
                        {"email": "c@x.com"},
                    ]
                },
            },
        )
    )

    async with make_client() as client:
        resolved = await client.batch_get_user_ids(["a@x.com", "b@x.com", "c@x.com"])

    assert resolved == {"a@x.com": "ou_a", "b@x.com": "ou_b"}
    request = route.calls.last.request
    assert request.url.params["user_id_type"] == "open_id"
    assert request.headers["Authorization"] == "Bearer t-1"
    assert json.loads(request.content) == {"emails": ["a@x.com", "b@x.com", "c@x.com"]}
