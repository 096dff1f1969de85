"""애플리케이션 설정 로더."""

from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """환경 변수 기반 프로젝트 설정."""

    model_config = SettingsConfigDict(
        env_prefix="GYEONGBO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_env: str = Field(
        default="development",
        description="실행 환경 (development 이면 콘솔 로그, 그 외 JSON 로그)",
    )
    log_level: str = Field(
        default="INFO",
        description="로그 레벨",
    )
    feishu_api_url: HttpUrl = Field(
        default="https://open.feishu.cn/open-apis",
        description="Feishu Open API 기본 URL (Lark 는 https://open.larksuite.com/open-apis)",
    )
    http_timeout: float = Field(
        default=10.0,
        description="HTTP 요청 타임아웃(초)",
        ge=0.1,
    )
    external_url: Optional[str] = Field(
        default=None,
        description="경보 목록 딥링크를 만들 외부 기본 URL",
    )
    post_locale: str = Field(
        default="zh_cn",
        description="post 메시지 본문 로케일 키",
    )
    receiver_name: str = Field(
        default="feishu",
        description="알림 수신기 이름",
    )
    disable_resolve_message: bool = Field(
        default=False,
        description="해소(resolved) 알림 비활성화 여부",
    )
    feishu_url: Optional[str] = Field(
        default=None,
        description="Feishu 봇 웹훅 URL",
    )
    feishu_app_id: Optional[str] = Field(
        default=None,
        description="Feishu 앱 ID (암호화 값 가능)",
    )
    feishu_app_secret: Optional[str] = Field(
        default=None,
        description="Feishu 앱 Secret (암호화 값 가능)",
    )
    feishu_msg_type: Optional[str] = Field(
        default=None,
        description="메시지 형식 (post | card)",
    )
    feishu_title: Optional[str] = Field(
        default=None,
        description="제목 템플릿",
    )
    feishu_message: Optional[str] = Field(
        default=None,
        description="본문 템플릿",
    )
    feishu_mention_users: Optional[str] = Field(
        default=None,
        description="쉼표로 구분한 멘션 대상 이메일 목록 (all 가능)",
    )
    encryption_keys: str = Field(
        default="",
        description="자격 증명 복호화에 사용할 Fernet 키 목록(쉼표 구분)",
    )
    image_directory: Optional[str] = Field(
        default=None,
        description="경보 스크린샷 이미지가 저장된 디렉터리",
    )

    @property
    def encryption_key_list(self) -> List[str]:
        return [key.strip() for key in self.encryption_keys.split(",") if key.strip()]

    def receiver_settings(self) -> dict[str, object]:
        """환경 변수로 받은 기본 수신기 설정을 원본 JSON 키로 반환한다."""

        raw = {
            "url": self.feishu_url,
            "appId": self.feishu_app_id,
            "appSecret": self.feishu_app_secret,
            "msgType": self.feishu_msg_type,
            "title": self.feishu_title,
            "message": self.feishu_message,
            "mentionUsers": self.feishu_mention_users,
        }
        return {key: value for key, value in raw.items() if value is not None}


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """싱글턴 형태로 설정을 반환한다."""

    return AppSettings()


__all__ = ["AppSettings", "get_settings"]
