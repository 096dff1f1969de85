"""Feishu 알림 연동에서 사용하는 예외 계층."""

from __future__ import annotations

from typing import Any, Dict, Optional


class GyeongboError(Exception):
    """프로젝트 공통 기본 예외."""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


class InvalidConfig(GyeongboError):
    """수신기 설정이 누락되었거나 잘못되었을 때 발생."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="INVALID_CONFIG", details=details)


class FeishuAPIError(GyeongboError):
    """Feishu Open API 가 0 이 아닌 code 를 반환했을 때 발생."""

    def __init__(self, api_code: Any, api_message: Optional[str] = None, *, endpoint: str = "") -> None:
        self.api_code = api_code
        self.api_message = api_message
        super().__init__(
            f"Feishu API 오류[{api_code}]: {api_message or '알 수 없는 오류'}",
            code="FEISHU_API_ERROR",
            details={"api_code": api_code, "endpoint": endpoint},
        )


class UploadFailed(GyeongboError):
    """이미지 업로드 실패. 알림 전체를 중단시키지 않는다."""

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(message, code="UPLOAD_FAILED", details={"path": path})


class MentionResolutionFailed(GyeongboError):
    """멘션 대상 사용자 ID 조회 실패."""

    def __init__(self, message: str, unresolved: Optional[list[str]] = None) -> None:
        super().__init__(
            message,
            code="MENTION_RESOLUTION_FAILED",
            details={"unresolved": list(unresolved or [])},
        )


class TemplateRenderFailed(GyeongboError):
    """템플릿 렌더링 실패."""

    def __init__(self, message: str, template: str = "") -> None:
        super().__init__(message, code="TEMPLATE_RENDER_FAILED", details={"template": template})


class EncodingFailed(GyeongboError):
    """메시지 페이로드를 JSON 으로 직렬화하지 못했을 때 발생."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="ENCODING_FAILED")


class DeliveryFailed(GyeongboError):
    """웹훅 전송 실패."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message, code="DELIVERY_FAILED", details={"status_code": status_code})


__all__ = [
    "DeliveryFailed",
    "EncodingFailed",
    "FeishuAPIError",
    "GyeongboError",
    "InvalidConfig",
    "MentionResolutionFailed",
    "TemplateRenderFailed",
    "UploadFailed",
]
