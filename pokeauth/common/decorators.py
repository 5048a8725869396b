"""Retry decorators for login flows.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

from pokeauth.common.exceptions import InvalidCredentialsError, LoginFailedError

logger = logging.getLogger(__name__)

MAXIMUM_LOGIN_ATTEMPTS = 5


def attempt_budget(max_attempts: int, *, should_retry: bool) -> int:
    """Number of login attempts allowed for one login call."""
    if not should_retry:
        return 1
    return max(1, min(max_attempts, MAXIMUM_LOGIN_ATTEMPTS))


def login_retry(func: Callable) -> Callable:
    """Decorator that re-runs a login method until it succeeds or the budget runs out.

    The decorated method's owner must expose ``should_retry`` and
    ``max_attempts``. ``InvalidCredentialsError`` is raised immediately;
    any other ``LoginFailedError`` consumes one attempt. Once the budget is
    exhausted a ``LoginFailedError`` chained to the last failure is raised.

    Args:
        func: Bound login method performing exactly one attempt

    Returns:
        Decorated method with retry logic
    """

    @wraps(func)
    def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
        attempts = attempt_budget(self.max_attempts, should_retry=self.should_retry)
        last_error: LoginFailedError | None = None
        for attempt in range(1, attempts + 1):
            try:
                return func(self, *args, **kwargs)
            except InvalidCredentialsError:
                raise
            except LoginFailedError as e:
                last_error = e
                logger.warning("Login attempt %d/%d failed: %s", attempt, attempts, e)

        msg = f"Exceeded maximum login attempts ({attempts})"
        raise LoginFailedError(msg) from last_error

    return wrapper
