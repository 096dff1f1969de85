"""Feishu 수신기 설정 파싱과 검증."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Callable, List, Mapping, Optional, Sequence, Union

from cryptography.fernet import Fernet, InvalidToken, MultiFernet
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import InvalidConfig
from ..services.templating import DEFAULT_MESSAGE_TEMPLATE, DEFAULT_TITLE_TEMPLATE

DecryptFunc = Callable[[str, str], str]
RawSettings = Union[Mapping[str, Any], str, bytes]


class MessageType(str, Enum):
    """Feishu 메시지 형식."""

    POST = "post"
    CARD = "interactive"

    @classmethod
    def parse(cls, value: object) -> "MessageType":
        if value is None or value == "":
            return cls.POST
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        if normalized == "card":
            return cls.CARD
        return cls(normalized)


class FeishuConfig(BaseModel):
    """알림 수신기 1개의 불변 설정."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    url: str = ""
    app_id: str = Field(default="", alias="appId")
    app_secret: str = Field(default="", alias="appSecret")
    message_type: MessageType = Field(default=MessageType.POST, alias="msgType")
    title: str = DEFAULT_TITLE_TEMPLATE
    message: str = DEFAULT_MESSAGE_TEMPLATE
    mention_users: List[str] = Field(default_factory=list, alias="mentionUsers")

    @field_validator("url", "app_id", "app_secret", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("message_type", mode="before")
    @classmethod
    def _parse_message_type(cls, value: Any) -> MessageType:
        return MessageType.parse(value)

    @field_validator("title", mode="before")
    @classmethod
    def _default_title(cls, value: Any) -> Any:
        return value or DEFAULT_TITLE_TEMPLATE

    @field_validator("message", mode="before")
    @classmethod
    def _default_message(cls, value: Any) -> Any:
        return value or DEFAULT_MESSAGE_TEMPLATE

    @field_validator("mention_users", mode="before")
    @classmethod
    def _split_mentions(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        return [str(item).strip() for item in value if str(item).strip()]


def _passthrough(field: str, value: str) -> str:
    return value


def _decode_raw(raw: RawSettings) -> Mapping[str, Any]:
    if isinstance(raw, Mapping):
        return raw
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise InvalidConfig(f"설정 JSON 을 해석할 수 없습니다: {exc}") from exc
    if not isinstance(data, Mapping):
        raise InvalidConfig("설정 JSON 은 객체여야 합니다.")
    return data


def load_config(raw: RawSettings, decrypt: Optional[DecryptFunc] = None) -> FeishuConfig:
    """원본 설정을 검증해 FeishuConfig 를 만든다.

    decrypt 는 자격 증명 필드(appId, appSecret)에만 적용된다.
    """

    data = _decode_raw(raw)
    try:
        settings = FeishuConfig.model_validate(data)
    except ValidationError as exc:
        raise InvalidConfig(
            "설정 값이 올바르지 않습니다.",
            details={"errors": [error["msg"] for error in exc.errors()]},
        ) from exc

    decrypt_fn = decrypt or _passthrough
    app_id = decrypt_fn("appId", settings.app_id)
    app_secret = decrypt_fn("appSecret", settings.app_secret)

    if not settings.url or not app_id or not app_secret:
        raise InvalidConfig("Feishu 웹훅 URL, AppID, AppSecret 이 모두 설정되어야 합니다.")

    return settings.model_copy(update={"app_id": app_id, "app_secret": app_secret})


def fernet_decryptor(keys: Sequence[str]) -> DecryptFunc:
    """Fernet 키 목록(키 로테이션 지원)으로 복호화 함수를 만든다."""

    if not keys:
        raise ValueError("At least one encryption key is required")
    fernet = MultiFernet([Fernet(key.encode()) for key in keys])

    def decrypt(field: str, value: str) -> str:
        if not value:
            return value
        try:
            return fernet.decrypt(value.encode("ascii")).decode("utf-8")
        except (InvalidToken, UnicodeError) as exc:
            raise InvalidConfig(f"{field} 값을 복호화할 수 없습니다.", details={"field": field}) from exc

    return decrypt


__all__ = [
    "DecryptFunc",
    "FeishuConfig",
    "MessageType",
    "fernet_decryptor",
    "load_config",
]
