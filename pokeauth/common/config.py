"""
Configuration settings for the authentication and signing clients.
"""

from __future__ import annotations

import logging
import os


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Config:
    """Central configuration class for all system settings."""

    def __init__(self) -> None:
        # PTC single sign-on endpoints
        self.LOGIN_URL: str = "https://sso.pokemon.com/sso/login"
        self.SERVICE_URL: str = "https://sso.pokemon.com/sso/oauth2.0/callbackAuthorize"
        self.LOGIN_OAUTH_URL: str = "https://sso.pokemon.com/sso/oauth2.0/authorize"
        self.REDIRECT_URI: str = "https://www.nianticlabs.com/pokemongo/error"
        self.CLIENT_ID: str = "mobile-app_pokemon-go"
        self.EVENT_ID: str = "submit"
        self.LOCALE: str = "en_US"

        # Device identity presented to the SSO service
        self.USER_AGENT: str = "pokemongo/1 CFNetwork/811.4.18 Darwin/16.5.0"
        self.UNITY_VERSION: str = "5.5.1f1"
        self.SSO_HOST: str = "sso.pokemon.com"

        # Login policy
        self.MAX_LOGIN_ATTEMPTS: int = 5
        self.TOKEN_LIFETIME_SECONDS: int = 7195  # Service tokens live 7200s
        self.HTTP_TIMEOUT: float = 10.0

        # Credentials (used by the CLI and ConfigLoader only)
        self.PTC_USERNAME: str | None = os.getenv("POKEAUTH_PTC_USERNAME")
        self.PTC_PASSWORD: str | None = os.getenv("POKEAUTH_PTC_PASSWORD")

        # Hashing service
        self.HASH_KEY: str | None = os.getenv("POKEAUTH_HASH_KEY")
        self.HASH_ENDPOINT: str | None = os.getenv("POKEAUTH_HASH_ENDPOINT")
        self.HASH_PROFILE: str = os.getenv("POKEAUTH_HASH_PROFILE", "0.51")
        self.HASH_USER_AGENT: str = "pokeauth/0.1.0"
        self.HASH_AWAIT_QUOTA: bool = _env_flag("POKEAUTH_AWAIT_QUOTA")
        # Negative retries a 429 for as long as the service keeps answering it
        self.HASH_MAX_LIMIT_RETRIES: int = int(
            os.getenv("POKEAUTH_HASH_MAX_LIMIT_RETRIES", "5")
        )

        # Logging
        self.LOG_LEVEL: int = getattr(
            logging, os.getenv("POKEAUTH_LOG_LEVEL", "INFO").upper(), logging.INFO
        )

    @property
    def ACCEPT_LANGUAGE(self) -> str:  # noqa: N802
        return self.LOCALE.replace("_", "-")

    def sso_headers(self) -> dict[str, str]:
        """Headers identifying the official app on every SSO request."""
        return {
            "User-Agent": self.USER_AGENT,
            "X-Unity-Version": self.UNITY_VERSION,
            "Host": self.SSO_HOST,
            "Connection": "keep-alive",
            "Accept-Language": self.ACCEPT_LANGUAGE,
        }
