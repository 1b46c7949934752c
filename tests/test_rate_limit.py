import pytest

from core.rate_limit import FixedWindowRateLimiter, rate_limit_headers


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_allows_up_to_max_then_rejects() -> None:
    limiter = FixedWindowRateLimiter(max_requests=3, window_s=60, clock=FakeClock())
    states = [limiter.hit("10.0.0.1") for _ in range(4)]
    assert [s.allowed for s in states] == [True, True, True, False]
    assert [s.remaining for s in states] == [2, 1, 0, 0]


def test_window_resets_after_it_elapses() -> None:
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(max_requests=2, window_s=60, clock=clock)
    limiter.hit("k")
    limiter.hit("k")
    assert not limiter.hit("k").allowed

    clock.now += 59
    assert not limiter.hit("k").allowed

    clock.now += 1
    state = limiter.hit("k")
    assert state.allowed
    assert state.remaining == 1


def test_window_is_fixed_from_first_hit() -> None:
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(max_requests=5, window_s=60, clock=clock)
    limiter.hit("k")
    clock.now += 45
    state = limiter.hit("k")
    assert state.reset_after_s == pytest.approx(15)


def test_keys_are_counted_separately() -> None:
    limiter = FixedWindowRateLimiter(max_requests=1, window_s=60, clock=FakeClock())
    assert limiter.hit("a").allowed
    assert limiter.hit("b").allowed
    assert not limiter.hit("a").allowed


def test_reset_clears_counters() -> None:
    limiter = FixedWindowRateLimiter(max_requests=1, window_s=60, clock=FakeClock())
    limiter.hit("a")
    limiter.hit("b")
    limiter.reset("a")
    assert limiter.hit("a").allowed
    assert not limiter.hit("b").allowed
    limiter.reset()
    assert limiter.hit("b").allowed


@pytest.mark.parametrize("max_requests, window_s", [(0, 60), (1, 0)])
def test_rejects_bad_configuration(max_requests: int, window_s: float) -> None:
    with pytest.raises(ValueError):
        FixedWindowRateLimiter(max_requests=max_requests, window_s=window_s)


def test_rate_limit_headers_round_reset_up() -> None:
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(max_requests=30, window_s=60, clock=clock)
    limiter.hit("k")
    clock.now += 0.5
    headers = rate_limit_headers(limiter.hit("k"))
    assert headers == {
        "RateLimit-Limit": "30",
        "RateLimit-Remaining": "28",
        "RateLimit-Reset": "60",
    }
