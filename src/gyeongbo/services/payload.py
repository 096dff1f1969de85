"""Feishu 메시지 페이로드(post / interactive card) 생성기.

post 형식은 블록마다 독립된 행을 만들고, card 형식은 요소를 하나의 목록에
순서대로 이어 붙이며 멘션 앞에 구분선을 둔다. 두 배치 모두 Feishu 가
기대하는 와이어 형식이므로 순서를 바꾸지 않는다.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple, Union

import structlog

from ..config.receiver import MessageType
from ..data.models import Alert, BatchStatus, BuildResult, Diagnostic, Image, batch_status
from ..errors import EncodingFailed, MentionResolutionFailed, UploadFailed
from .images import ImageStore, NullImageStore, with_stored_images
from .mentions import MentionResolver

logger = structlog.get_logger(__name__)

ALERT_LIST_PATH = "/alerting/list"
ALERT_LIST_TEXT = "Alerting list"


@dataclass(frozen=True, slots=True)
class TextBlock:
    text: str


@dataclass(frozen=True, slots=True)
class ImageBlock:
    image_keys: Tuple[str, ...]


@dataclass(frozen=True, slots=True)
class LinkBlock:
    text: str
    href: str


@dataclass(frozen=True, slots=True)
class DividerBlock:
    pass


@dataclass(frozen=True, slots=True)
class MentionBlock:
    user_ids: Tuple[str, ...]


Block = Union[TextBlock, ImageBlock, LinkBlock, DividerBlock, MentionBlock]


@dataclass(frozen=True, slots=True)
class CardStyle:
    template: str
    icon: str


CARD_STYLES: Dict[BatchStatus, CardStyle] = {
    BatchStatus.FIRING: CardStyle(template="red", icon="warning_outlined"),
    BatchStatus.RESOLVED: CardStyle(template="green", icon="resolve_outlined"),
    BatchStatus.MIXED: CardStyle(template="orange", icon="warning_outlined"),
}


def _post_row(block: Block) -> List[Dict[str, Any]]:
    if isinstance(block, TextBlock):
        return [{"tag": "text", "text": block.text}]
    if isinstance(block, ImageBlock):
        return [{"tag": "img", "image_key": key} for key in block.image_keys]
    if isinstance(block, LinkBlock):
        return [{"tag": "a", "text": block.text, "href": block.href}]
    if isinstance(block, MentionBlock):
        return [{"tag": "at", "user_id": user_id} for user_id in block.user_ids]
    return []


def _card_element(block: Block) -> Dict[str, Any]:
    if isinstance(block, TextBlock):
        return {"tag": "markdown", "content": block.text}
    if isinstance(block, ImageBlock):
        if len(block.image_keys) == 1:
            return {
                "tag": "img",
                "img_key": block.image_keys[0],
                "alt": {"tag": "plain_text", "content": ""},
            }
        return {
            "tag": "img_combination",
            "combination_mode": "bisect" if len(block.image_keys) == 2 else "trisect",
            "img_list": [{"img_key": key} for key in block.image_keys],
        }
    if isinstance(block, LinkBlock):
        return {
            "tag": "action",
            "actions": [
                {
                    "tag": "button",
                    "text": {"tag": "plain_text", "content": block.text},
                    "type": "default",
                    "url": block.href,
                }
            ],
        }
    if isinstance(block, DividerBlock):
        return {"tag": "hr"}
    return {
        "tag": "markdown",
        "content": " ".join(f"<at id={user_id}></at>" for user_id in block.user_ids),
    }


@dataclass(frozen=True, slots=True)
class PostMessage:
    """post 형식 메시지. 블록 하나가 content 의 한 행이 된다."""

    title: str
    blocks: Tuple[Block, ...] = ()
    locale: str = "zh_cn"

    def to_dict(self) -> Dict[str, Any]:
        rows = [row for row in (_post_row(block) for block in self.blocks) if row]
        return {
            "msg_type": MessageType.POST.value,
            "content": {
                "post": {
                    self.locale: {
                        "title": self.title,
                        "content": rows,
                    }
                }
            },
        }


@dataclass(frozen=True, slots=True)
class CardMessage:
    """interactive card 형식 메시지. 블록이 elements 에 순서대로 들어간다."""

    title: str
    style: CardStyle
    blocks: Tuple[Block, ...] = ()
    card_link: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        card: Dict[str, Any] = {
            "header": {
                "title": {"tag": "plain_text", "content": self.title},
                "template": self.style.template,
                "icon": {"tag": "standard_icon", "token": self.style.icon},
            },
        }
        if self.card_link:
            card["card_link"] = {"url": self.card_link}
        card["elements"] = [_card_element(block) for block in self.blocks]
        return {"msg_type": MessageType.CARD.value, "card": card}


Message = Union[PostMessage, CardMessage]


def render_payload(message: Message) -> str:
    """메시지를 JSON 문자열로 직렬화한다."""

    try:
        return json.dumps(message.to_dict(), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise EncodingFailed(f"페이로드 직렬화 실패: {exc}") from exc


def alert_list_url(external_url: Optional[str]) -> str:
    if not external_url:
        return ""
    return external_url.rstrip("/") + ALERT_LIST_PATH


def assemble_blocks(
    message_type: MessageType,
    text: str,
    image_keys: Sequence[str],
    link: str,
    mention_ids: Sequence[str],
) -> Tuple[Block, ...]:
    """텍스트 → 이미지 → 링크 → (card 만) 구분선 → 멘션 순서로 블록을 만든다."""

    blocks: List[Block] = []
    if text:
        blocks.append(TextBlock(text=text))
    if image_keys:
        blocks.append(ImageBlock(image_keys=tuple(image_keys)))
    if link:
        blocks.append(LinkBlock(text=ALERT_LIST_TEXT, href=link))
    if mention_ids:
        if message_type is MessageType.CARD and blocks:
            blocks.append(DividerBlock())
        blocks.append(MentionBlock(user_ids=tuple(mention_ids)))
    return tuple(blocks)


class ImageUploader(Protocol):
    async def upload_image(self, path: str) -> str: ...


@dataclass
class _Collected:
    image_keys: List[str] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)


class PayloadBuilder:
    """경보 묶음 하나에 대한 메시지 문서를 만든다."""

    def __init__(
        self,
        *,
        uploader: ImageUploader,
        mentions: Optional[MentionResolver] = None,
        images: Optional[ImageStore] = None,
        mention_users: Sequence[str] = (),
        external_url: Optional[str] = None,
        locale: str = "zh_cn",
    ) -> None:
        self._uploader = uploader
        self._mentions = mentions
        self._images = images or NullImageStore()
        self._mention_users = list(mention_users)
        self._external_url = external_url
        self._locale = locale

    async def build(
        self,
        message_type: MessageType,
        title: str,
        message: str,
        alerts: Sequence[Alert],
    ) -> BuildResult:
        collected = _Collected()
        await self._upload_images(alerts, collected)
        mention_ids = await self._resolve_mentions(collected)
        link = alert_list_url(self._external_url)
        blocks = assemble_blocks(message_type, message, collected.image_keys, link, mention_ids)

        if message_type is MessageType.CARD:
            style = CARD_STYLES[batch_status(alerts)]
            payload: Message = CardMessage(title=title, style=style, blocks=blocks, card_link=link or None)
        else:
            payload = PostMessage(title=title, blocks=blocks, locale=self._locale)

        return BuildResult(body=render_payload(payload), diagnostics=tuple(collected.diagnostics))

    async def _upload_images(self, alerts: Sequence[Alert], collected: _Collected) -> None:
        async def upload(index: int, image: Image) -> None:
            try:
                image_key = await self._uploader.upload_image(image.path)
            except UploadFailed as exc:
                logger.error("failed upload image", error=str(exc), path=image.path, url=image.url)
                collected.diagnostics.append(Diagnostic.from_error(exc, index=index))
                return
            collected.image_keys.append(image_key)

        await with_stored_images(alerts, self._images, upload)

    async def _resolve_mentions(self, collected: _Collected) -> List[str]:
        if self._mentions is None or not self._mention_users:
            return []
        try:
            return await self._mentions.resolve(self._mention_users)
        except MentionResolutionFailed as exc:
            logger.warning("failed to resolve mention users", error=str(exc))
            collected.diagnostics.append(Diagnostic.from_error(exc))
            return []


__all__ = [
    "ALERT_LIST_PATH",
    "Block",
    "CARD_STYLES",
    "CardMessage",
    "CardStyle",
    "DividerBlock",
    "ImageBlock",
    "LinkBlock",
    "MentionBlock",
    "PayloadBuilder",
    "PostMessage",
    "TextBlock",
    "alert_list_url",
    "assemble_blocks",
    "render_payload",
]
