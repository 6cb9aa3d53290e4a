from __future__ import annotations

import pytest

from agentdex.payments import Paid, TimedOut, await_payment
from agentdex.schemas import PaymentStatus


class _Clock:
    def __init__(self) -> None:
        self.current = 100.0
        self.sleeps: list[float] = []

    def time(self) -> float:
        return self.current

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.current += seconds


def _status_sequence(unpaid_calls: int):
    calls: list[str] = []

    def check(payment_hash: str) -> PaymentStatus:
        calls.append(payment_hash)
        if len(calls) > unpaid_calls:
            return PaymentStatus.from_response({"status": "paid"})
        return PaymentStatus.from_response({"status": "pending"})

    return check, calls


@pytest.mark.parametrize("unpaid_calls", [0, 1, 4])
def test_returns_paid_after_k_plus_one_checks(unpaid_calls: int) -> None:
    clock = _Clock()
    check, calls = _status_sequence(unpaid_calls)

    outcome = await_payment(
        check,
        "hash-1",
        poll_interval=3.0,
        timeout=900.0,
        sleep=clock.sleep,
        clock=clock.time,
    )

    assert isinstance(outcome, Paid)
    assert outcome.checks == unpaid_calls + 1
    assert calls == ["hash-1"] * (unpaid_calls + 1)
    assert clock.sleeps == [3.0] * (unpaid_calls + 1)


def test_times_out_when_never_paid_with_fake_clock() -> None:
    clock = _Clock()
    check, calls = _status_sequence(unpaid_calls=10_000)

    outcome = await_payment(
        check,
        "hash-2",
        poll_interval=3.0,
        timeout=10.0,
        sleep=clock.sleep,
        clock=clock.time,
    )

    assert isinstance(outcome, TimedOut)
    assert outcome.checks == 4
    assert len(calls) == 4
    assert outcome.elapsed >= 10.0


def test_times_out_with_short_real_intervals() -> None:
    check, calls = _status_sequence(unpaid_calls=10_000)

    outcome = await_payment(check, "hash-3", poll_interval=0.01, timeout=0.025)

    assert isinstance(outcome, TimedOut)
    assert outcome.checks == len(calls)
    assert 1 <= outcome.checks <= 3


def test_status_check_errors_propagate() -> None:
    def check(payment_hash: str) -> PaymentStatus:
        raise RuntimeError("backend down")

    with pytest.raises(RuntimeError):
        await_payment(check, "hash-4", poll_interval=0.0, timeout=1.0)
