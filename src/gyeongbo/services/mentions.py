"""멘션 대상 식별자를 Feishu 사용자 ID 로 변환한다."""

from __future__ import annotations

from typing import Dict, List, Protocol, Sequence

import httpx

from ..errors import FeishuAPIError, MentionResolutionFailed

MENTION_ALL = "all"


class UserLookupClient(Protocol):
    async def batch_get_user_ids(self, emails: Sequence[str]) -> Dict[str, str]: ...


class MentionResolver:
    """이메일 목록을 한 번의 일괄 조회로 open_id 목록으로 바꾼다."""

    def __init__(self, client: UserLookupClient) -> None:
        self._client = client

    async def resolve(self, identifiers: Sequence[str]) -> List[str]:
        """입력 순서대로 사용자 ID 를 반환한다.

        "all" 이 하나라도 있으면 조회 없이 ["all"] 을 반환한다. 응답 순서에
        기대지 않고 원래 이메일 기준으로 다시 정렬한다.
        """

        if any(identifier == MENTION_ALL for identifier in identifiers):
            return [MENTION_ALL]
        if not identifiers:
            return []

        unique = list(dict.fromkeys(identifiers))
        try:
            resolved = await self._client.batch_get_user_ids(unique)
        except (httpx.HTTPError, FeishuAPIError, ValueError) as exc:
            raise MentionResolutionFailed(f"사용자 ID 조회 실패: {exc}", unresolved=unique) from exc

        missing = [identifier for identifier in unique if identifier not in resolved]
        if missing:
            raise MentionResolutionFailed(
                f"사용자 ID 를 찾지 못한 대상이 있습니다: {', '.join(missing)}",
                unresolved=missing,
            )
        return [resolved[identifier] for identifier in identifiers]


__all__ = ["MENTION_ALL", "MentionResolver", "UserLookupClient"]
