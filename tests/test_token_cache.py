from gyeongbo.clients.token_cache import TokenCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_token_is_returned_until_expiry() -> None:
    clock = FakeClock()
    cache = TokenCache(clock=clock)
    cache.put("cli_a", "t-1", ttl=60)

    clock.now += 59.9
    assert cache.get("cli_a") == "t-1"

    clock.now += 0.1
    assert cache.get("cli_a") is None
    assert len(cache) == 0


def test_entries_are_keyed_by_app_id() -> None:
    cache = TokenCache(clock=FakeClock())
    cache.put("cli_a", "t-a", ttl=60)
    cache.put("cli_b", "t-b", ttl=60)

    assert cache.get("cli_a") == "t-a"
    assert cache.get("cli_b") == "t-b"


def test_last_write_wins_and_invalidate() -> None:
    cache = TokenCache(clock=FakeClock())
    cache.put("cli_a", "t-1", ttl=60)
    cache.put("cli_a", "t-2", ttl=60)
    assert cache.get("cli_a") == "t-2"

    cache.invalidate("cli_a")
    assert cache.get("cli_a") is None


def test_non_positive_ttl_is_not_cached() -> None:
    cache = TokenCache(clock=FakeClock())
    cache.put("cli_a", "t-1", ttl=0)

    assert cache.get("cli_a") is None
