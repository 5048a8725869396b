"""
Quota window shared by every caller of one hashing key.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from pokeauth.common.clock import SystemClock
from pokeauth.common.exceptions import HashError

if TYPE_CHECKING:
    from pokeauth.common.interfaces import Clock

logger = logging.getLogger(__name__)

# Response header -> RateLimitState attribute
HEADER_FIELDS: dict[str, str] = {
    "X-MaxRequestCount": "max_requests",
    "X-RatePeriodEnd": "period_end",
    "X-RateRequestsRemaining": "requests_remaining",
    "X-RateLimitSeconds": "rate_limit_seconds",
    "X-AuthTokenExpiration": "key_expiration",
}

# Used when a refusal arrives before any period length is known
DEFAULT_FALLBACK_WAIT_SECONDS = 5.0


class QuotaPolicy(str, Enum):
    """When a non-blocking caller is refused before contacting the service.

    STRICT refuses while the quota is exhausted and the observed period has
    not ended yet. LEGACY keeps the historical condition, which refuses only
    once the observed period has already ended without a fresher count.
    """

    STRICT = "strict"
    LEGACY = "legacy"


@dataclass(frozen=True)
class QuotaSnapshot:
    max_requests: int
    requests_remaining: int
    rate_limit_seconds: int
    period_end: int
    key_expiration: int
    observed: bool


def _parse_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        logger.warning("Ignoring malformed quota header value: %r", value)
        return None


class RateLimitState:
    """Quota counters for one hashing key.

    Timestamps (``period_end``, ``key_expiration``) are Unix seconds as sent
    by the service. All reads and writes happen under one condition variable;
    waiters are woken whenever a response moves ``period_end``.
    """

    def __init__(self, clock: Clock | None = None):
        self.clock = clock or SystemClock()
        self._condition = threading.Condition()
        self._interrupts = 0

        self.max_requests: int = 0
        self.requests_remaining: int = 0
        self.rate_limit_seconds: int = 0
        self.period_end: int = 0
        self.key_expiration: int = 0
        self.observed: bool = False

    def _now(self) -> float:
        return self.clock.current_time_millis() / 1000

    def update_from_headers(self, headers: Mapping[str, str]) -> bool:
        """Apply the quota headers of one response; returns True if any was present."""
        values = {
            attr: _parse_int(headers.get(header))
            for header, attr in HEADER_FIELDS.items()
        }
        with self._condition:
            previous_end = self.period_end
            updated = False
            for attr, value in values.items():
                if value is not None:
                    setattr(self, attr, value)
                    updated = True
            if updated:
                self.observed = True
            if self.period_end != previous_end:
                self._condition.notify_all()
        return updated

    def seconds_until_reset(self) -> float:
        with self._condition:
            return max(0.0, self.period_end - self._now())

    def is_exhausted(self) -> bool:
        """True while no requests are left in a period that has not ended."""
        with self._condition:
            return (
                self.observed
                and self.requests_remaining <= 0
                and self._now() <= self.period_end
            )

    def refusal_delay(self, policy: QuotaPolicy) -> float | None:
        """Seconds to wait if a request must be refused locally, else None."""
        with self._condition:
            if not self.observed or self.requests_remaining > 0:
                return None
            now = self._now()
            if policy is QuotaPolicy.STRICT:
                refused = now <= self.period_end
            else:
                refused = now > self.period_end
            if not refused:
                return None
            return max(0.0, self.period_end - now)

    def fallback_wait_seconds(self) -> float:
        """Window to wait out a refusal that did not name a future period end."""
        with self._condition:
            if self.rate_limit_seconds > 0:
                return float(self.rate_limit_seconds)
            return DEFAULT_FALLBACK_WAIT_SECONDS

    def await_reset(self, fallback_seconds: float | None = None) -> None:
        """Block until the current period ends or a newer one is observed.

        When the known period has already ended and ``fallback_seconds`` is
        given, wait that long instead of returning at once.

        Raises:
            HashError: if ``interrupt()`` is called while waiting
        """
        with self._condition:
            period_end = self.period_end
            interrupts = self._interrupts
            deadline: float = period_end
            if fallback_seconds and period_end <= self._now():
                deadline = self._now() + fallback_seconds
            while True:
                if self._interrupts != interrupts:
                    msg = "Interrupted while waiting for hash quota reset"
                    raise HashError(msg)
                if self.period_end != period_end:
                    return
                remaining = deadline - self._now()
                if remaining <= 0:
                    return
                logger.debug("Waiting %.1fs for hash quota reset", remaining)
                self._condition.wait(remaining)

    def interrupt(self) -> None:
        """Wake every waiter in ``await_reset`` with a HashError."""
        with self._condition:
            self._interrupts += 1
            self._condition.notify_all()

    def snapshot(self) -> QuotaSnapshot:
        with self._condition:
            return QuotaSnapshot(
                max_requests=self.max_requests,
                requests_remaining=self.requests_remaining,
                rate_limit_seconds=self.rate_limit_seconds,
                period_end=self.period_end,
                key_expiration=self.key_expiration,
                observed=self.observed,
            )
