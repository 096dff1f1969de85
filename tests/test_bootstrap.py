import pytest
from cryptography.fernet import Fernet

from gyeongbo.config.logging import mask_secrets_processor
from gyeongbo.config.receiver import MessageType
from gyeongbo.config.settings import AppSettings
from gyeongbo.data import Alert
from gyeongbo.errors import InvalidConfig
from gyeongbo.runtime.bootstrap import build_notifier
from gyeongbo.services.images import FileImageStore, ImageNotFound


@pytest.mark.asyncio
async def test_build_notifier_decrypts_credentials_from_settings() -> None:
    key = Fernet.generate_key().decode("ascii")
    fernet = Fernet(key.encode())
    settings = AppSettings(
        feishu_url="https://open.feishu.cn/open-apis/bot/v2/hook/abc",
        feishu_app_id=fernet.encrypt(b"cli_a").decode("ascii"),
        feishu_app_secret=fernet.encrypt(b"s3cret").decode("ascii"),
        feishu_msg_type="card",
        feishu_mention_users="a@x.com,b@x.com",
        encryption_keys=key,
        disable_resolve_message=True,
    )

    notifier, hooks = build_notifier(settings)
    try:
        assert notifier.config.app_id == "cli_a"
        assert notifier.config.app_secret == "s3cret"
        assert notifier.config.message_type is MessageType.CARD
        assert notifier.config.mention_users == ["a@x.com", "b@x.com"]
        assert notifier.should_notify_on_resolve() is False
    finally:
        for hook in hooks:
            await hook()


def test_build_notifier_fails_without_credentials() -> None:
    with pytest.raises(InvalidConfig):
        build_notifier(AppSettings(feishu_url="https://example.invalid/hook"))


def test_file_image_store_resolves_tokens_inside_directory(tmp_path) -> None:
    (tmp_path / "panel.png").write_bytes(b"png")
    store = FileImageStore(str(tmp_path), base_url="http://images.local/")

    image = store.get_image("panel.png")

    assert image.path == str(tmp_path / "panel.png")
    assert image.url == "http://images.local/panel.png"
    with pytest.raises(ImageNotFound):
        store.get_image("../panel.png")
    with pytest.raises(ImageNotFound):
        store.get_image("missing.png")


def test_alert_image_token_comes_from_annotation() -> None:
    alert = Alert(annotations={"__alertImageToken__": "panel.png"})

    assert alert.image_token == "panel.png"
    assert Alert().image_token is None


def test_mask_secrets_processor_redacts_credentials() -> None:
    event = {"event": "token refreshed", "tenant_access_token": "t-1", "app_secret": "s", "app_id": "cli_a"}

    masked = mask_secrets_processor(None, "info", event)

    assert masked["tenant_access_token"] == "[REDACTED]"
    assert masked["app_secret"] == "[REDACTED]"
    assert masked["app_id"] == "cli_a"


def test_mask_secrets_processor_keeps_image_token() -> None:
    event = {"event": "image not found in store", "image_token": "panel.png", "tenant_access_token": "t-1"}

    masked = mask_secrets_processor(None, "warning", event)

    assert masked["image_token"] == "panel.png"
    assert masked["tenant_access_token"] == "[REDACTED]"
