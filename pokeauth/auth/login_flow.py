"""
Pokémon Trainer Club single sign-on ticket exchange.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

import requests
from pydantic import ValidationError

from pokeauth.common.config import Config
from pokeauth.common.exceptions import InvalidCredentialsError, LoginFailedError
from pokeauth.common.models import LoginContext, PtcErrorPayload

if TYPE_CHECKING:
    from pokeauth.common.interfaces import Clock

HTTP_OK = 200
TICKET_COOKIE = "CASTGC"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginTicket:
    """Ticket granted by the SSO service and the instant it stops being used."""

    token: str
    expires_timestamp: int


def extract_ticket(set_cookie_headers: Iterable[str]) -> str | None:
    """Return the CASTGC value from Set-Cookie headers, or None when absent."""
    marker = f"{TICKET_COOKIE}="
    for header in set_cookie_headers:
        start = header.find(marker)
        if start < 0:
            continue
        value = header[start + len(marker) :]
        end = value.find(";")
        return value if end < 0 else value[:end]
    return None


def set_cookie_headers(response: requests.Response) -> list[str]:
    """All Set-Cookie header values of a response, unmerged when possible."""
    raw_headers = getattr(response.raw, "headers", None)
    if raw_headers is not None and hasattr(raw_headers, "getlist"):
        return list(raw_headers.getlist("Set-Cookie"))
    value = response.headers.get("Set-Cookie")
    return [value] if value else []


class PtcLoginFlow:
    """Performs one SSO login attempt against sso.pokemon.com."""

    def __init__(
        self,
        clock: Clock,
        config: Config | None = None,
        session_factory: Callable[[], requests.Session] = requests.Session,
        timeout: float | None = None,
    ):
        self.clock = clock
        self.config = config or Config()
        self.session_factory = session_factory
        self.timeout = timeout if timeout is not None else self.config.HTTP_TIMEOUT

    def run(self, username: str, password: str) -> LoginTicket:
        """Run the full exchange with a cookie store scoped to this attempt."""
        session = self.session_factory()
        session.headers.update(self.config.sso_headers())
        try:
            context = self.fetch_login_context(session)
            response = self.submit_credentials(session, context, username, password)
            body = response.text.strip()
            self.check_errors(body)
            ticket = extract_ticket(set_cookie_headers(response))
            if ticket is None:
                msg = f"Failed to fetch token, body: {body}"
                raise LoginFailedError(msg, response.status_code)
        finally:
            session.close()

        expires = (
            self.clock.current_time_millis()
            + self.config.TOKEN_LIFETIME_SECONDS * 1000
        )
        logger.info("PTC login succeeded for %s", username)
        return LoginTicket(token=ticket, expires_timestamp=expires)

    def fetch_login_context(self, session: requests.Session) -> LoginContext:
        """GET the authorize endpoint and parse the one-time login context."""
        try:
            response = session.get(
                self.config.LOGIN_OAUTH_URL,
                params={
                    "client_id": self.config.CLIENT_ID,
                    "redirect_uri": self.config.REDIRECT_URI,
                    "locale": self.config.LOCALE,
                },
                allow_redirects=False,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            msg = "Failed to receive contents from server"
            raise LoginFailedError(msg) from e

        if response.status_code != HTTP_OK:
            msg = f"Unexpected authorize response ({response.status_code})"
            raise LoginFailedError(msg, response.status_code)

        try:
            return LoginContext.model_validate_json(response.text)
        except ValidationError as e:
            msg = "Looks like the servers are down"
            raise LoginFailedError(msg, response.status_code) from e

    def submit_credentials(
        self,
        session: requests.Session,
        context: LoginContext,
        username: str,
        password: str,
    ) -> requests.Response:
        """POST the login form; redirects are left for the caller to inspect."""
        try:
            return session.post(
                self.config.LOGIN_URL,
                params={"service": self.config.SERVICE_URL},
                data={
                    "lt": context.lt,
                    "execution": context.execution,
                    "_eventId": self.config.EVENT_ID,
                    "locale": self.config.LOCALE,
                    "username": username,
                    "password": password,
                },
                allow_redirects=False,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            msg = "Network failure"
            raise LoginFailedError(msg) from e

    @staticmethod
    def check_errors(body: str) -> None:
        """Raise when a non-empty login response body carries an error payload."""
        if not body:
            return
        try:
            payload = PtcErrorPayload.model_validate_json(body)
        except ValidationError as e:
            msg = "Unmarshalling failure"
            raise LoginFailedError(msg) from e

        message = payload.message()
        if message is not None:
            raise InvalidCredentialsError(message)
