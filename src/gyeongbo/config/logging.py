"""structlog 기반 구조화 로깅 설정."""

from __future__ import annotations

import logging
import sys
from typing import Any, Dict, Optional

import structlog

from .settings import AppSettings, get_settings

_SECRET_KEYS = ("secret", "access_token", "authorization", "password")


def setup_logging(settings: Optional[AppSettings] = None) -> None:
    """structlog 와 표준 logging 을 함께 구성한다."""

    settings = settings or get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        mask_secrets_processor,
    ]

    if settings.app_env == "development":
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=True),
        ]
    else:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def mask_secrets_processor(
    logger: Any, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """토큰, 앱 Secret 등 자격 증명 값을 로그에서 가린다."""

    for key in list(event_dict.keys()):
        if any(marker in key.lower() for marker in _SECRET_KEYS):
            event_dict[key] = "[REDACTED]"
    return event_dict


__all__ = ["mask_secrets_processor", "setup_logging"]
