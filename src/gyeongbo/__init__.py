"""Gyeongbo: Alertmanager 경보를 Feishu(Lark) 봇 메시지로 전달하는 패키지."""

from .clients.feishu import FeishuClient  # noqa: F401
from .clients.token_cache import TokenCache  # noqa: F401
from .clients.webhook import HttpxWebhookSender, WebhookSender  # noqa: F401
from .config.receiver import FeishuConfig, MessageType, fernet_decryptor, load_config  # noqa: F401
from .config.settings import AppSettings, get_settings  # noqa: F401
from .data import (  # noqa: F401
    Alert,
    AlertStatus,
    BatchStatus,
    BuildResult,
    Diagnostic,
    Image,
    NotificationResult,
)
from .errors import (  # noqa: F401
    DeliveryFailed,
    EncodingFailed,
    FeishuAPIError,
    GyeongboError,
    InvalidConfig,
    MentionResolutionFailed,
    TemplateRenderFailed,
    UploadFailed,
)
from .runtime.bootstrap import build_application, build_notifier  # noqa: F401
from .services.images import FileImageStore  # noqa: F401
from .services.mentions import MentionResolver  # noqa: F401
from .services.notifier import FeishuNotifier  # noqa: F401
from .services.payload import PayloadBuilder  # noqa: F401
from .services.templating import TemplateRenderer  # noqa: F401

__all__ = [
    "Alert",
    "AlertStatus",
    "AppSettings",
    "BatchStatus",
    "BuildResult",
    "DeliveryFailed",
    "Diagnostic",
    "EncodingFailed",
    "FeishuAPIError",
    "FeishuClient",
    "FeishuConfig",
    "FeishuNotifier",
    "FileImageStore",
    "GyeongboError",
    "HttpxWebhookSender",
    "Image",
    "InvalidConfig",
    "MentionResolutionFailed",
    "MentionResolver",
    "MessageType",
    "NotificationResult",
    "PayloadBuilder",
    "TemplateRenderFailed",
    "TemplateRenderer",
    "TokenCache",
    "UploadFailed",
    "WebhookSender",
    "build_application",
    "build_notifier",
    "fernet_decryptor",
    "get_settings",
    "load_config",
]
