"""Tests for the bounded poll loop."""

import pytest

from utils.polling import PollTimeoutError, poll_until


def succeed_on(check_number):
    calls = []

    def condition():
        calls.append(1)
        return len(calls) >= check_number

    return condition, calls


class TestPollUntil:

    def test_first_check_happens_after_one_interval(self, fake_clock):
        attempts = poll_until(lambda: True, 1, 60, clock=fake_clock, sleep=fake_clock.sleep)

        assert attempts == 1
        assert fake_clock.sleeps == [1]

    def test_success_just_before_ceiling(self, fake_clock):
        condition, calls = succeed_on(59)

        assert poll_until(condition, 1, 60, clock=fake_clock, sleep=fake_clock.sleep) == 59
        assert fake_clock.now == 59

    def test_success_at_ceiling(self, fake_clock):
        condition, calls = succeed_on(60)

        assert poll_until(condition, 1, 60, clock=fake_clock, sleep=fake_clock.sleep) == 60
        assert fake_clock.now == 60

    def test_times_out_after_ceiling(self, fake_clock):
        condition, calls = succeed_on(61)

        with pytest.raises(PollTimeoutError) as exc_info:
            poll_until(condition, 1, 60, clock=fake_clock, sleep=fake_clock.sleep)

        assert exc_info.value.attempts == 60
        assert len(calls) == 60
        assert fake_clock.now == 60

    def test_condition_errors_propagate(self, fake_clock):
        def condition():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            poll_until(condition, 1, 60, clock=fake_clock, sleep=fake_clock.sleep)
