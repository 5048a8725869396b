"""
Client facade wiring a credential provider and a hash provider together.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

import requests

from pokeauth.auth.login_flow import PtcLoginFlow
from pokeauth.auth.ptc import PtcCredentialProvider
from pokeauth.client.config_loader import ConfigLoader
from pokeauth.common.clock import SystemClock
from pokeauth.common.models import AuthInfo, ClientConfig, Hash
from pokeauth.hashing.pokehash import PokeHashProvider
from pokeauth.hashing.rate_limit import RateLimitState

if TYPE_CHECKING:
    from pokeauth.common.interfaces import (
        Clock,
        CredentialProvider,
        HashApiListener,
        HashProvider,
    )

logger = logging.getLogger(__name__)


class AuthClient:
    """Everything an envelope builder needs before sending a request."""

    def __init__(
        self,
        credential_provider: CredentialProvider,
        hash_provider: HashProvider,
    ):
        self.credential_provider = credential_provider
        self.hash_provider = hash_provider

    @classmethod
    def from_config(
        cls,
        client_config: ClientConfig | None = None,
        clock: Clock | None = None,
        listener: HashApiListener | None = None,
        rate_limit: RateLimitState | None = None,
        session: requests.Session | None = None,
        sso_session_factory: Callable[[], requests.Session] | None = None,
    ) -> AuthClient:
        """Build a PTC + PokeHash client from configuration."""
        loader = ConfigLoader(client_config or ClientConfig())
        clock = clock or SystemClock()
        username, password = loader.require_credentials()

        login_flow = PtcLoginFlow(
            clock,
            loader.config,
            session_factory=sso_session_factory or requests.Session,
            timeout=loader.http_timeout,
        )
        credential_provider = PtcCredentialProvider(
            username,
            password,
            clock=clock,
            login_flow=login_flow,
            config=loader.config,
            max_attempts=loader.max_login_attempts,
            should_retry=loader.should_retry,
        )
        hash_provider = PokeHashProvider(
            loader.require_hash_key(),
            profile=loader.load_profile(),
            listener=listener,
            rate_limit=rate_limit or RateLimitState(clock),
            await_quota=loader.await_quota,
            max_limit_retries=loader.max_limit_retries,
            clock=clock,
            session=session,
            config=loader.config,
            timeout=loader.http_timeout,
        )
        logger.debug(
            "Auth client ready (hash profile %s, await quota %s)",
            hash_provider.profile.name,
            loader.await_quota,
        )
        return cls(credential_provider, hash_provider)

    def get_auth_info(self, refresh: bool = False) -> AuthInfo:  # noqa: FBT001, FBT002
        return self.credential_provider.get_auth_info(refresh)

    def sign(
        self,
        timestamp: int,
        latitude: float,
        longitude: float,
        altitude: float,
        auth_ticket: bytes,
        session_data: bytes,
        requests: Sequence[bytes],
    ) -> Hash:
        return self.hash_provider.provide(
            timestamp, latitude, longitude, altitude, auth_ticket, session_data, requests
        )

    def reset(self) -> None:
        """Drop the cached session ticket."""
        self.credential_provider.reset()
