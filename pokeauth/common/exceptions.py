"""
Custom exceptions for the authentication and signing clients.
"""

from __future__ import annotations

from collections.abc import Mapping


class PokeAuthError(Exception):
    """Base class for every error raised by pokeauth."""


class LoginFailedError(PokeAuthError):
    """Exception for SSO transport, parsing or protocol failures."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class InvalidCredentialsError(LoginFailedError):
    """The SSO service explicitly rejected the submitted credentials."""


class HashError(PokeAuthError):
    """Exception for unclassified hashing service failures.

    ``headers`` holds the response headers when a response was received.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.headers = headers


class HashUnauthorizedError(HashError):
    """Exception for a rejected hashing key."""

    def __init__(
        self, message: str, headers: Mapping[str, str] | None = None
    ) -> None:
        super().__init__(message, 401, headers)


class HashLimitExceededError(HashError):
    """Exception for an exhausted hashing quota."""

    def __init__(
        self,
        message: str,
        status_code: int | None = 429,
        retry_after: float | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, status_code, headers)
        self.retry_after = retry_after
