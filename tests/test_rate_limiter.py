import pytest

from location.ratelimit import (
    CLIENT_SCOPE,
    GLOBAL_SCOPE,
    FixedWindowRateLimiter,
    client_key,
)


def _limiter(clock, **overrides) -> FixedWindowRateLimiter:
    options = {"window_ms": 1000, "per_client_max": 3, "global_max": 5, "clock": clock}
    options.update(overrides)
    return FixedWindowRateLimiter(**options)


def test_per_client_cap_rejects_fourth_request(clock) -> None:
    limiter = _limiter(clock)

    decisions = [limiter.check("10.0.0.1") for _ in range(4)]

    assert [d.allowed for d in decisions] == [True, True, True, False]
    assert decisions[-1].scope == CLIENT_SCOPE


def test_window_reset_allows_blocked_client_again(clock) -> None:
    limiter = _limiter(clock)
    for _ in range(3):
        limiter.check("10.0.0.1")
    assert not limiter.check("10.0.0.1").allowed

    clock.advance(1001)

    assert limiter.check("10.0.0.1").allowed


def test_window_boundary_is_inclusive(clock) -> None:
    limiter = _limiter(clock)
    for _ in range(3):
        limiter.check("10.0.0.1")

    clock.advance(999)
    assert not limiter.check("10.0.0.1").allowed

    clock.advance(1)
    assert limiter.check("10.0.0.1").allowed


def test_global_cap_rejects_sixth_request_across_clients(clock) -> None:
    limiter = _limiter(clock)
    clients = ["a", "a", "b", "b", "c"]
    for client in clients:
        assert limiter.check(client).allowed

    decision = limiter.check("d")

    assert not decision.allowed
    assert decision.scope == GLOBAL_SCOPE


def test_rejected_requests_are_not_counted(clock) -> None:
    limiter = _limiter(clock, per_client_max=1, global_max=2)
    assert limiter.check("a").allowed
    # Rejected by the client cap; must not consume global capacity.
    assert not limiter.check("a").allowed
    assert not limiter.check("a").allowed

    assert limiter.check("b").allowed


def test_global_rejection_does_not_consume_client_quota(clock) -> None:
    limiter = _limiter(clock, per_client_max=2, global_max=1)
    assert limiter.check("a").allowed
    assert not limiter.check("b").allowed

    clock.advance(1000)

    assert limiter.check("b").allowed
    assert limiter._clients["b"].count == 1


def test_retry_after_reflects_remaining_window(clock) -> None:
    limiter = _limiter(clock)
    for _ in range(3):
        limiter.check("a")
    clock.advance(250)

    decision = limiter.check("a")

    assert decision.retry_after_ms == pytest.approx(750)
    assert decision.retry_after_seconds == 1


def test_idle_clients_are_pruned(clock) -> None:
    limiter = _limiter(clock, global_max=100, max_tracked_clients=2)
    limiter.check("a")
    limiter.check("b")
    clock.advance(1000)

    limiter.check("c")

    assert limiter.tracked_clients == 1


def test_reset_clears_state(clock) -> None:
    limiter = _limiter(clock)
    for _ in range(3):
        limiter.check("a")

    limiter.reset()

    assert limiter.check("a").allowed


def test_window_must_be_positive() -> None:
    with pytest.raises(ValueError):
        FixedWindowRateLimiter(window_ms=0)


class _Client:
    def __init__(self, host):
        self.host = host


class _Request:
    def __init__(self, host=None, headers=None):
        self.client = _Client(host) if host else None
        self.headers = headers or {}


def test_client_key_prefers_peer_address() -> None:
    request = _Request("192.168.1.5", {"x-forwarded-for": "1.2.3.4"})

    assert client_key(request) == "192.168.1.5"


def test_client_key_falls_back_to_forwarded_for() -> None:
    request = _Request(None, {"x-forwarded-for": "1.2.3.4, 10.0.0.1"})

    assert client_key(request) == "1.2.3.4"
    assert client_key(_Request()) == "unknown"
