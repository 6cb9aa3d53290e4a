"""Invoice payment polling."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Union

from agentdex.schemas import PaymentStatus

DEFAULT_POLL_INTERVAL = 3.0
DEFAULT_PAYMENT_TIMEOUT = 15 * 60.0

logger = logging.getLogger("agentdex.payments")


@dataclass(frozen=True)
class Paid:
    status: PaymentStatus
    checks: int


@dataclass(frozen=True)
class TimedOut:
    checks: int
    elapsed: float


PollOutcome = Union[Paid, TimedOut]


def await_payment(
    status_check: Callable[[str], PaymentStatus],
    payment_hash: str,
    *,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    timeout: float = DEFAULT_PAYMENT_TIMEOUT,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> PollOutcome:
    """Poll ``status_check`` until it reports paid or ``timeout`` elapses.

    Each iteration sleeps ``poll_interval`` first and then checks once.
    Errors raised by ``status_check`` propagate to the caller.
    """
    started = clock()
    checks = 0
    while clock() - started < timeout:
        sleep(poll_interval)
        status = status_check(payment_hash)
        checks += 1
        logger.debug("payment %s check %d: status=%s", payment_hash, checks, status.status)
        if status.paid:
            return Paid(status=status, checks=checks)
    return TimedOut(checks=checks, elapsed=clock() - started)
