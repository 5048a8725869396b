"""
Credential provider for Pokémon Trainer Club accounts.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pokeauth.auth.login_flow import PtcLoginFlow
from pokeauth.common.clock import SystemClock
from pokeauth.common.config import Config
from pokeauth.common.decorators import login_retry
from pokeauth.common.models import JWT, AuthInfo

if TYPE_CHECKING:
    from pokeauth.common.interfaces import Clock

PROVIDER_NAME = "ptc"

logger = logging.getLogger(__name__)


class PtcCredentialProvider:
    """Keeps a PTC session ticket fresh and turns it into AuthInfo.

    The ticket is obtained lazily: the first ``get_token_id`` or
    ``get_auth_info`` call logs in. Concurrent refreshes on one instance are
    not de-duplicated; each caller that sees an expired ticket runs its own
    login and the last one to finish wins.
    """

    def __init__(
        self,
        username: str,
        password: str,
        clock: Clock | None = None,
        login_flow: PtcLoginFlow | None = None,
        config: Config | None = None,
        max_attempts: int | None = None,
        should_retry: bool = True,  # noqa: FBT001, FBT002
    ):
        self.config = config or Config()
        self.username = username
        self.password = password
        self.clock = clock or SystemClock()
        self.login_flow = login_flow or PtcLoginFlow(self.clock, self.config)
        self.max_attempts = (
            max_attempts
            if max_attempts is not None
            else self.config.MAX_LOGIN_ATTEMPTS
        )
        self.should_retry = should_retry

        # Token state
        self.token_id: str | None = None
        self.expires_timestamp: int = 0

    @login_retry
    def login(self) -> str:
        """Log in and store the new ticket."""
        ticket = self.login_flow.run(self.username, self.password)
        self.token_id = ticket.token
        self.expires_timestamp = ticket.expires_timestamp
        return ticket.token

    def get_token_id(self, refresh: bool = False) -> str:  # noqa: FBT001, FBT002
        """Return the current ticket, logging in first when needed."""
        if refresh or self.is_token_id_expired():
            self.login()
        assert self.token_id is not None
        return self.token_id

    def get_auth_info(self, refresh: bool = False) -> AuthInfo:  # noqa: FBT001, FBT002
        """Build the AuthInfo fragment for the next outgoing request."""
        token_id = self.get_token_id(refresh)
        return AuthInfo(provider=PROVIDER_NAME, token=JWT(contents=token_id))

    def is_token_id_expired(self) -> bool:
        return self.clock.current_time_millis() > self.expires_timestamp

    def reset(self) -> None:
        """Forget the current ticket so the next call logs in again."""
        self.token_id = None
        self.expires_timestamp = 0
        logger.debug("PTC token reset for %s", self.username)
