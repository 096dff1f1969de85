"""경보와 알림 결과에서 사용하는 공용 데이터 모델."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

IMAGE_TOKEN_ANNOTATION = "__alertImageToken__"


class AlertStatus(str, Enum):
    """단일 경보 상태."""

    FIRING = "firing"
    RESOLVED = "resolved"


class BatchStatus(str, Enum):
    """경보 묶음 전체 상태."""

    FIRING = "firing"
    RESOLVED = "resolved"
    MIXED = "mixed"


class Alert(BaseModel):
    """Alertmanager 웹훅 형식의 경보."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)
    starts_at: Optional[datetime] = Field(default=None, alias="startsAt")
    ends_at: Optional[datetime] = Field(default=None, alias="endsAt")
    generator_url: str = Field(default="", alias="generatorURL")
    fingerprint: str = ""
    explicit_status: Optional[AlertStatus] = Field(default=None, alias="status")

    @field_validator("starts_at", "ends_at")
    @classmethod
    def _normalize_time(cls, value: Optional[datetime]) -> Optional[datetime]:
        # Alertmanager 는 미설정 시각을 0001-01-01 로 보낸다.
        if value is None or value.year <= 1:
            return None
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    @property
    def status(self) -> AlertStatus:
        if self.explicit_status is not None:
            return self.explicit_status
        if self.ends_at is not None and self.ends_at <= datetime.now(timezone.utc):
            return AlertStatus.RESOLVED
        return AlertStatus.FIRING

    @property
    def is_resolved(self) -> bool:
        return self.status is AlertStatus.RESOLVED

    @property
    def name(self) -> str:
        return self.labels.get("alertname", "")

    @property
    def image_token(self) -> Optional[str]:
        return self.annotations.get(IMAGE_TOKEN_ANNOTATION) or None

    def template_data(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "labels": dict(self.labels),
            "annotations": {
                key: value for key, value in self.annotations.items() if not key.startswith("__")
            },
            "starts_at": self.starts_at,
            "ends_at": self.ends_at,
            "generator_url": self.generator_url,
            "fingerprint": self.fingerprint,
        }


def batch_status(alerts: Sequence[Alert]) -> BatchStatus:
    """모두 해소되면 resolved, 모두 발생 중이면 firing, 섞여 있으면 mixed."""

    resolved = sum(1 for alert in alerts if alert.is_resolved)
    if alerts and resolved == len(alerts):
        return BatchStatus.RESOLVED
    if resolved == 0:
        return BatchStatus.FIRING
    return BatchStatus.MIXED


@dataclass(frozen=True, slots=True)
class Image:
    """이미지 저장소에 보관된 경보 스크린샷."""

    token: str
    path: str
    url: str = ""


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """알림을 막지 않은 비치명적 문제 하나."""

    kind: str
    message: str
    context: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_error(cls, error: Exception, **context: Any) -> "Diagnostic":
        kind = getattr(error, "code", type(error).__name__)
        details = dict(getattr(error, "details", {}) or {})
        details.update(context)
        return cls(kind=kind, message=str(error), context=details)


@dataclass(frozen=True, slots=True)
class BuildResult:
    """직렬화된 페이로드와 생성 중 발생한 비치명적 문제 목록."""

    body: str
    diagnostics: Tuple[Diagnostic, ...] = ()


@dataclass(frozen=True, slots=True)
class NotificationResult:
    """notify 호출 1회의 결과."""

    sent: bool
    error: Optional[Exception] = None
    diagnostics: Tuple[Diagnostic, ...] = ()

    @property
    def error_message(self) -> Optional[str]:
        return str(self.error) if self.error is not None else None


__all__ = [
    "Alert",
    "AlertStatus",
    "BatchStatus",
    "BuildResult",
    "Diagnostic",
    "IMAGE_TOKEN_ANNOTATION",
    "Image",
    "NotificationResult",
    "batch_status",
]
