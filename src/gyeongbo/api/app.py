"""Alertmanager 웹훅을 받아 Feishu 로 전달하는 FastAPI 엔드포인트."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List

import structlog
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ..data.models import Alert, BatchStatus, NotificationResult, batch_status
from ..services.notifier import FeishuNotifier

logger = structlog.get_logger(__name__)


class AlertmanagerWebhook(BaseModel):
    """Alertmanager webhook_config 요청 본문."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    receiver: str = ""
    status: str = ""
    alerts: List[Alert] = Field(default_factory=list)


@dataclass
class ApplicationContext:
    notifier: FeishuNotifier
    shutdown_hooks: List[Callable[[], Awaitable[None]]] = field(default_factory=list)


def _result_body(result: NotificationResult) -> Dict[str, Any]:
    return {
        "sent": result.sent,
        "error": result.error_message,
        "diagnostics": [
            {"kind": item.kind, "message": item.message} for item in result.diagnostics
        ],
    }


def create_app(context: ApplicationContext) -> FastAPI:
    app = FastAPI(title="Gyeongbo Feishu Relay", version="0.1.0")
    app.state.context = context

    def get_context() -> ApplicationContext:
        return app.state.context

    @app.on_event("shutdown")
    async def _shutdown() -> None:  # pragma: no cover - FastAPI 훅
        for hook in context.shutdown_hooks:
            await hook()

    @app.get("/health")
    async def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/alerts")
    async def receive_alerts(
        webhook: AlertmanagerWebhook,
        ctx: ApplicationContext = Depends(get_context),
    ) -> JSONResponse:
        notifier = ctx.notifier
        if not webhook.alerts:
            return JSONResponse({"sent": False, "skipped": "no alerts"})
        if batch_status(webhook.alerts) is BatchStatus.RESOLVED and not notifier.should_notify_on_resolve():
            logger.info("resolve message disabled, skipping", receiver=notifier.name)
            return JSONResponse({"sent": False, "skipped": "resolve message disabled"})

        result = await notifier.notify(webhook.alerts)
        status_code = 200 if result.sent else 502
        return JSONResponse(_result_body(result), status_code=status_code)

    return app


__all__ = ["AlertmanagerWebhook", "ApplicationContext", "create_app"]
