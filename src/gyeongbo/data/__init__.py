"""데이터 모델 서브패키지."""

from .models import (
    IMAGE_TOKEN_ANNOTATION,
    Alert,
    AlertStatus,
    BatchStatus,
    BuildResult,
    Diagnostic,
    Image,
    NotificationResult,
    batch_status,
)

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
