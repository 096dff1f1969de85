"""런타임 구성과 FastAPI 애플리케이션 부트스트랩."""

from __future__ import annotations

from typing import TYPE_CHECKING, Awaitable, Callable, List, Optional, Tuple

from ..api.app import ApplicationContext, create_app
from ..clients.feishu import FeishuClient
from ..clients.token_cache import TokenCache
from ..clients.webhook import HttpxWebhookSender
from ..config.logging import setup_logging
from ..config.receiver import RawSettings, fernet_decryptor, load_config
from ..config.settings import AppSettings, get_settings
from ..services.images import FileImageStore, ImageStore, NullImageStore
from ..services.mentions import MentionResolver
from ..services.notifier import FeishuNotifier
from ..services.payload import PayloadBuilder
from ..services.templating import TemplateRenderer

if TYPE_CHECKING:  # pragma: no cover
    from fastapi import FastAPI

ShutdownHook = Callable[[], Awaitable[None]]


def build_notifier(
    settings: Optional[AppSettings] = None,
    raw_config: Optional[RawSettings] = None,
    *,
    token_cache: Optional[TokenCache] = None,
) -> Tuple[FeishuNotifier, List[ShutdownHook]]:
    """설정으로 FeishuNotifier 를 조립하고 종료 시 호출할 훅을 함께 반환한다."""

    settings = settings or get_settings()
    keys = settings.encryption_key_list
    decrypt = fernet_decryptor(keys) if keys else None
    config = load_config(raw_config if raw_config is not None else settings.receiver_settings(), decrypt)

    client = FeishuClient(config.app_id, config.app_secret, settings=settings, token_cache=token_cache)
    sender = HttpxWebhookSender(timeout=settings.http_timeout)
    images: ImageStore = (
        FileImageStore(settings.image_directory) if settings.image_directory else NullImageStore()
    )
    builder = PayloadBuilder(
        uploader=client,
        mentions=MentionResolver(client),
        images=images,
        mention_users=config.mention_users,
        external_url=settings.external_url,
        locale=settings.post_locale,
    )
    notifier = FeishuNotifier(
        config,
        sender=sender,
        builder=builder,
        renderer=TemplateRenderer(settings.external_url),
        name=settings.receiver_name,
        disable_resolve_message=settings.disable_resolve_message,
    )
    return notifier, [client.aclose, sender.aclose]


async def build_application(settings: Optional[AppSettings] = None) -> "FastAPI":
    settings = settings or get_settings()
    setup_logging(settings)
    notifier, hooks = build_notifier(settings)
    context = ApplicationContext(notifier=notifier, shutdown_hooks=hooks)
    return create_app(context)


__all__ = ["build_application", "build_notifier"]
