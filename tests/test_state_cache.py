from codex_oauth import OAuthState, OAuthStateCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def _state() -> OAuthState:
    return OAuthState(verifier="v", redirect_uri="http://localhost/cb", return_url="/done")


def test_pop_is_single_use() -> None:
    cache = OAuthStateCache(clock=FakeClock())
    cache.put("S", _state())

    assert cache.pop("S").verifier == "v"
    assert cache.pop("S") is None


def test_entries_expire_after_ttl() -> None:
    clock = FakeClock()
    cache = OAuthStateCache(clock=clock)
    cache.put("S", _state())
    cache.put("T", _state())

    clock.now += 299
    assert cache.pop("S") is not None

    clock.now += 1
    assert cache.pop("T") is None
    assert len(cache) == 0


def test_unknown_state() -> None:
    assert OAuthStateCache().pop("nope") is None
