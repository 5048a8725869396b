"""Infrastructure layer: Configuration loading for the auth client.
"""

from __future__ import annotations

import logging

from pokeauth.common import setup_logger
from pokeauth.common.config import Config
from pokeauth.common.models import ClientConfig
from pokeauth.hashing.profiles import HashVersionProfile, get_profile


class ConfigLoader:
    """Resolves client settings: explicit ClientConfig, then environment, then defaults."""

    def __init__(self, client_config: ClientConfig):
        self.config: Config = Config()

        self.username = client_config.username or self.config.PTC_USERNAME
        self.password = client_config.password or self.config.PTC_PASSWORD
        self.hash_key = client_config.hash_key or self.config.HASH_KEY
        self.hash_endpoint = client_config.hash_endpoint or self.config.HASH_ENDPOINT
        self.hash_profile_name = client_config.hash_profile or self.config.HASH_PROFILE

        self.await_quota: bool = (
            client_config.await_quota
            if client_config.await_quota is not None
            else self.config.HASH_AWAIT_QUOTA
        )
        max_limit_retries = (
            client_config.max_limit_retries
            if client_config.max_limit_retries is not None
            else self.config.HASH_MAX_LIMIT_RETRIES
        )
        self.max_limit_retries: int | None = (
            None if max_limit_retries < 0 else max_limit_retries
        )
        self.max_login_attempts: int = (
            client_config.max_login_attempts
            if client_config.max_login_attempts is not None
            else self.config.MAX_LOGIN_ATTEMPTS
        )
        self.should_retry: bool = (
            client_config.should_retry
            if client_config.should_retry is not None
            else True
        )
        self.http_timeout: float = (
            client_config.http_timeout
            if client_config.http_timeout is not None
            else self.config.HTTP_TIMEOUT
        )
        self.log_level: int = (
            client_config.log_level
            if client_config.log_level is not None
            else self.config.LOG_LEVEL
        )

        # Setup logging
        self.logger = logging.getLogger("pokeauth")
        setup_logger(self.logger, self.log_level)

    def require_credentials(self) -> tuple[str, str]:
        """Return the PTC username and password or fail naming what is missing."""
        if not self.username or not self.password:
            msg = (
                "PTC credentials not configured. "
                "Set POKEAUTH_PTC_USERNAME and POKEAUTH_PTC_PASSWORD."
            )
            raise ValueError(msg)
        return self.username, self.password

    def require_hash_key(self) -> str:
        if not self.hash_key:
            msg = "Hash key not configured. Set POKEAUTH_HASH_KEY."
            raise ValueError(msg)
        return self.hash_key

    def load_profile(self) -> HashVersionProfile:
        """Selected hashing generation, with the endpoint override applied."""
        profile = get_profile(self.hash_profile_name)
        if self.hash_endpoint:
            profile = profile.with_endpoint(self.hash_endpoint)
        return profile
