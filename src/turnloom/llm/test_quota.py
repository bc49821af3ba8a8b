import pytest

from turnloom.llm import QuotaTracker


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def quota(clock) -> QuotaTracker:
    return QuotaTracker(hourly_limit=2, reset_interval=3600, backoff=300, max_consecutive_errors=3, clock=clock)


def test_hourly_limit_blocks_until_next_window(quota, clock):
    assert quota.check_available()
    quota.record_success()
    quota.record_success()

    assert not quota.check_available()
    assert quota.blocked_until == 1000.0 + 3600

    clock.advance(3599)
    assert not quota.check_available()

    clock.advance(1)
    assert quota.check_available()
    assert quota.status().request_count == 0


def test_provider_quota_error_backs_off(quota, clock):
    quota.record_quota_exceeded()
    assert not quota.check_available()
    assert quota.blocked_until == 1300.0

    clock.advance(300)
    assert quota.check_available()
    assert quota.blocked_until is None
    assert quota.status().error_count == 0


def test_error_streak_blocks_and_is_forgiven_gradually(quota, clock):
    for _ in range(3):
        quota.record_error("connection refused")
    assert not quota.check_available()

    clock.advance(300)
    assert quota.check_available()
    assert quota.status().error_count == 2

    # One more failure re-triggers the backoff
    quota.record_error("connection refused")
    assert not quota.check_available()


def test_success_clears_error_streak(quota):
    quota.record_error("timeout")
    quota.record_error("timeout")
    quota.record_success()
    quota.record_error("timeout")
    assert quota.check_available()


def test_status(quota, clock):
    quota.record_success()
    clock.advance(600)

    status = quota.status()

    assert status.available
    assert status.remaining_requests == 1
    assert status.request_count == 1
    assert not status.blocked
    assert status.seconds_until_reset == 3000.0


def test_trackers_are_independent(clock):
    first = QuotaTracker(hourly_limit=1, clock=clock)
    second = QuotaTracker(hourly_limit=1, clock=clock)
    first.record_success()
    assert not first.check_available()
    assert second.check_available()
