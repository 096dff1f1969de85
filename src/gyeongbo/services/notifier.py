"""경보 묶음을 Feishu 메시지로 렌더링해 웹훅으로 전송한다."""

from __future__ import annotations

from typing import List, Optional, Sequence

import structlog

from ..clients.webhook import WebhookSender
from ..config.receiver import FeishuConfig
from ..data.models import Alert, Diagnostic, NotificationResult
from ..errors import GyeongboError
from .payload import PayloadBuilder
from .templating import TemplateRenderer

logger = structlog.get_logger(__name__)


class NotifierBase:
    """수신기 이름과 해소 알림 비활성화 플래그."""

    def __init__(self, name: str, *, disable_resolve_message: bool = False) -> None:
        self.name = name
        self._disable_resolve_message = disable_resolve_message

    @property
    def disable_resolve_message(self) -> bool:
        return self._disable_resolve_message

    def should_notify_on_resolve(self) -> bool:
        return not self._disable_resolve_message


class FeishuNotifier(NotifierBase):
    """렌더링 → 페이로드 생성 → 전송 순서로 알림 1건을 처리한다."""

    def __init__(
        self,
        config: FeishuConfig,
        *,
        sender: WebhookSender,
        builder: PayloadBuilder,
        renderer: Optional[TemplateRenderer] = None,
        name: str = "feishu",
        disable_resolve_message: bool = False,
    ) -> None:
        super().__init__(name, disable_resolve_message=disable_resolve_message)
        self._config = config
        self._sender = sender
        self._builder = builder
        self._renderer = renderer or TemplateRenderer()

    @property
    def config(self) -> FeishuConfig:
        return self._config

    async def notify(self, alerts: Sequence[Alert]) -> NotificationResult:
        log = logger.bind(receiver=self.name, alerts=len(alerts))
        log.info("sending feishu")

        diagnostics: List[Diagnostic] = []
        title = self._render(self._config.title, alerts, diagnostics, field="title")
        message = self._render(self._config.message, alerts, diagnostics, field="message")

        try:
            built = await self._builder.build(self._config.message_type, title, message, alerts)
        except GyeongboError as exc:
            log.error("failed to build feishu body", error=str(exc))
            return NotificationResult(sent=False, error=exc, diagnostics=tuple(diagnostics))
        diagnostics.extend(built.diagnostics)

        try:
            await self._sender.send_webhook(self._config.url, "POST", built.body)
        except GyeongboError as exc:
            log.error("failed to send feishu", error=str(exc), webhook=self.name)
            return NotificationResult(sent=False, error=exc, diagnostics=tuple(diagnostics))

        return NotificationResult(sent=True, diagnostics=tuple(diagnostics))

    def _render(
        self,
        template: str,
        alerts: Sequence[Alert],
        diagnostics: List[Diagnostic],
        *,
        field: str,
    ) -> str:
        text, error = self._renderer.render(template, alerts)
        if error is not None:
            logger.warning("failed to template feishu message", error=str(error), field=field)
            diagnostics.append(Diagnostic.from_error(error, field=field))
        return text


__all__ = ["FeishuNotifier", "NotifierBase"]
