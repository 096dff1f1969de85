"""웹훅 전송 채널."""

from __future__ import annotations

from typing import Any, Optional, Protocol

import httpx

from ..errors import DeliveryFailed


class WebhookSender(Protocol):
    async def send_webhook(self, url: str, method: str, body: str) -> None: ...


class HttpxWebhookSender:
    """JSON 본문을 웹훅 URL 로 전송한다.

    Feishu 봇 웹훅은 HTTP 200 과 함께 0 이 아닌 code 로 실패를 알리므로
    응답 본문의 code 도 확인한다.
    """

    def __init__(self, *, client: Optional[httpx.AsyncClient] = None, timeout: float = 10.0) -> None:
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def send_webhook(self, url: str, method: str, body: str) -> None:
        try:
            response = await self._client.request(
                method,
                url,
                content=body.encode("utf-8"),
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as exc:
            raise DeliveryFailed(f"웹훅 전송 실패: {exc}") from exc
        if not response.is_success:
            raise DeliveryFailed(
                f"웹훅 응답 오류: HTTP {response.status_code} {response.text}",
                status_code=response.status_code,
            )
        code = self._response_code(response)
        if code not in (None, 0):
            raise DeliveryFailed(
                f"웹훅 응답 오류[{code}]: {response.text}",
                status_code=response.status_code,
            )

    @staticmethod
    def _response_code(response: httpx.Response) -> Any:
        try:
            payload = response.json()
        except ValueError:
            return None
        if not isinstance(payload, dict):
            return None
        return payload.get("code", payload.get("StatusCode"))


__all__ = ["HttpxWebhookSender", "WebhookSender"]
