"""Feishu Open API 연동 클라이언트."""

from __future__ import annotations

import mimetypes
import os
from typing import Any, Dict, Mapping, Optional, Sequence

import httpx
import structlog

from ..config.settings import AppSettings, get_settings
from ..errors import FeishuAPIError, UploadFailed
from .token_cache import TokenCache

logger = structlog.get_logger(__name__)

TENANT_TOKEN_PATH = "auth/v3/tenant_access_token/internal/"
IMAGE_UPLOAD_PATH = "image/v4/put/"
BATCH_USER_ID_PATH = "contact/v3/users/batch_get_id"


class FeishuClient:
    """토큰 발급, 이미지 업로드, 사용자 ID 조회를 담당하는 비동기 클라이언트."""

    def __init__(
        self,
        app_id: str,
        app_secret: str,
        settings: Optional[AppSettings] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        token_cache: Optional[TokenCache] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._app_id = app_id
        self._app_secret = app_secret
        base_url = str(self._settings.feishu_api_url).rstrip("/") + "/"
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=self._settings.http_timeout,
        )
        self._owns_client = client is None
        self._token_cache = token_cache or TokenCache()

    @property
    def app_id(self) -> str:
        return self._app_id

    async def __aenter__(self) -> "FeishuClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """내부 HTTP 클라이언트를 종료한다."""

        if self._owns_client:
            await self._client.aclose()

    async def get_tenant_access_token(self) -> str:
        """캐시된 토큰을 반환하고, 없거나 만료됐으면 새로 발급받는다."""

        cached = self._token_cache.get(self._app_id)
        if cached is not None:
            return cached

        response = await self._client.post(
            TENANT_TOKEN_PATH,
            json={"app_id": self._app_id, "app_secret": self._app_secret},
        )
        payload = self._decode_response(response, TENANT_TOKEN_PATH)
        token = payload.get("tenant_access_token")
        if not isinstance(token, str) or not token:
            raise FeishuAPIError("invalid", "tenant_access_token 이 응답에 없습니다.", endpoint=TENANT_TOKEN_PATH)
        expire = payload.get("expire", 0)
        try:
            ttl = float(expire)
        except (TypeError, ValueError):
            ttl = 0.0
        self._token_cache.put(self._app_id, token, ttl)
        logger.debug("tenant token refreshed", app_id=self._app_id, expire=ttl)
        return token

    async def upload_image(self, path: str) -> str:
        """로컬 이미지를 업로드하고 image_key 를 반환한다."""

        try:
            token = await self.get_tenant_access_token()
            content_type = mimetypes.guess_type(path)[0] or "application/octet-stream"
            with open(path, "rb") as image:
                response = await self._client.post(
                    IMAGE_UPLOAD_PATH,
                    files={"image": (os.path.basename(path), image, content_type)},
                    data={"image_type": "message"},
                    headers={"Authorization": f"Bearer {token}"},
                )
            payload = self._decode_response(response, IMAGE_UPLOAD_PATH)
        except (OSError, ValueError, httpx.HTTPError, FeishuAPIError) as exc:
            raise UploadFailed(f"이미지 업로드 실패: {exc}", path=path) from exc

        data = payload.get("data")
        image_key = data.get("image_key") if isinstance(data, Mapping) else None
        if not isinstance(image_key, str) or not image_key:
            raise UploadFailed("이미지 업로드 응답에 image_key 가 없습니다.", path=path)
        return image_key

    async def batch_get_user_ids(self, emails: Sequence[str]) -> Dict[str, str]:
        """이메일 목록을 open_id 로 일괄 변환한다. 찾은 사용자만 반환한다."""

        token = await self.get_tenant_access_token()
        response = await self._client.post(
            BATCH_USER_ID_PATH,
            params={"user_id_type": "open_id"},
            json={"emails": list(emails)},
            headers={"Authorization": f"Bearer {token}"},
        )
        payload = self._decode_response(response, BATCH_USER_ID_PATH)
        data = payload.get("data")
        records = data.get("user_list") if isinstance(data, Mapping) else None
        if not isinstance(records, list):
            raise FeishuAPIError("invalid", "user_list 데이터 형식이 올바르지 않습니다.", endpoint=BATCH_USER_ID_PATH)
        resolved: Dict[str, str] = {}
        for record in records:
            if not isinstance(record, Mapping):
                continue
            email = record.get("email")
            user_id = record.get("user_id")
            if isinstance(email, str) and isinstance(user_id, str) and user_id:
                resolved[email] = user_id
        return resolved

    def _decode_response(self, response: httpx.Response, endpoint: str) -> Mapping[str, Any]:
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, Mapping):
            raise FeishuAPIError("invalid", "응답 본문이 JSON 객체가 아닙니다.", endpoint=endpoint)
        code = payload.get("code", 0)
        if code != 0:
            raise FeishuAPIError(code, payload.get("msg"), endpoint=endpoint)
        return payload


__all__ = ["FeishuClient"]
