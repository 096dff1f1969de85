"""tenant_access_token 만료 기반 캐시."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional


@dataclass(frozen=True, slots=True)
class CachedToken:
    token: str
    expires_at: float


class TokenCache:
    """앱 ID 별로 토큰 하나를 만료 시각까지 보관한다.

    잠금을 두지 않는다. 만료 직후 동시에 들어온 호출은 각자 토큰을 새로
    발급받을 수 있고 마지막으로 저장한 값이 남는다.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
        self._clock = clock or time.monotonic
        self._entries: Dict[str, CachedToken] = {}

    def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            self._entries.pop(key, None)
            return None
        return entry.token

    def put(self, key: str, token: str, ttl: float) -> None:
        if ttl <= 0:
            self._entries.pop(key, None)
            return
        self._entries[key] = CachedToken(token=token, expires_at=self._clock() + ttl)

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["CachedToken", "TokenCache"]
