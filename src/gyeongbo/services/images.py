"""경보 스크린샷 이미지 저장소."""

from __future__ import annotations

import os
from typing import Awaitable, Callable, Protocol, Sequence

import structlog

from ..data.models import Alert, Image

logger = structlog.get_logger(__name__)

ImageCallback = Callable[[int, Image], Awaitable[None]]


class ImageNotFound(LookupError):
    """토큰에 해당하는 이미지가 없을 때 발생."""


class ImageStore(Protocol):
    def get_image(self, token: str) -> Image: ...


class FileImageStore:
    """디렉터리에 저장된 파일을 토큰(파일 이름)으로 찾는다."""

    def __init__(self, directory: str, *, base_url: str = "") -> None:
        self._directory = os.path.abspath(directory)
        self._base_url = base_url.rstrip("/")

    def get_image(self, token: str) -> Image:
        if not token or os.path.basename(token) != token:
            raise ImageNotFound(token)
        path = os.path.join(self._directory, token)
        if not os.path.isfile(path):
            raise ImageNotFound(token)
        url = f"{self._base_url}/{token}" if self._base_url else ""
        return Image(token=token, path=path, url=url)


class NullImageStore:
    """이미지 저장소가 설정되지 않았을 때 사용한다."""

    def get_image(self, token: str) -> Image:
        raise ImageNotFound(token)


async def with_stored_images(
    alerts: Sequence[Alert],
    store: ImageStore,
    callback: ImageCallback,
) -> None:
    """이미지 토큰이 있는 경보마다 callback(index, image) 를 호출한다."""

    for index, alert in enumerate(alerts):
        token = alert.image_token
        if token is None:
            continue
        try:
            image = store.get_image(token)
        except ImageNotFound:
            logger.warning("image not found in store", image_token=token, alert=alert.name)
            continue
        await callback(index, image)


__all__ = [
    "FileImageStore",
    "ImageCallback",
    "ImageNotFound",
    "ImageStore",
    "NullImageStore",
    "with_stored_images",
]
